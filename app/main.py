from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.core.exceptions import (
    AccessControlException,
    UnauthorizedException,
    NotFoundException,
    ForbiddenException,
    ValidationException,
    GoneException,
    ConflictException,
    StorageException,
)
from app.core.logging_config import configure_logging
from app.core.permissions import validate_catalog
from app.routes import access_routes, audit_routes, invite_routes, temp_password_routes


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    # Refuse to start with an inconsistent permission catalog
    validate_catalog()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,  # Disable in production
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

# CORS middleware
cors_origins = settings.cors_origins_list
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _error_body(exc: AccessControlException) -> dict:
    return {
        "detail": str(exc),
        "reason": exc.reason_code.value if exc.reason_code else None,
    }


# Exception handlers
@app.exception_handler(UnauthorizedException)
async def unauthorized_exception_handler(request: Request, exc: UnauthorizedException):
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content=_error_body(exc),
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(NotFoundException)
async def not_found_exception_handler(request: Request, exc: NotFoundException):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=_error_body(exc))


@app.exception_handler(ForbiddenException)
async def forbidden_exception_handler(request: Request, exc: ForbiddenException):
    return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content=_error_body(exc))


@app.exception_handler(ValidationException)
async def validation_exception_handler(request: Request, exc: ValidationException):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=_error_body(exc))


@app.exception_handler(GoneException)
async def gone_exception_handler(request: Request, exc: GoneException):
    return JSONResponse(status_code=status.HTTP_410_GONE, content=_error_body(exc))


@app.exception_handler(ConflictException)
async def conflict_exception_handler(request: Request, exc: ConflictException):
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=_error_body(exc))


@app.exception_handler(StorageException)
async def storage_exception_handler(request: Request, exc: StorageException):
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=_error_body(exc))


# Health check endpoint
@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": settings.APP_VERSION}


# Root endpoint
@app.get("/")
async def root():
    return {
        "message": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs" if settings.DEBUG else "Documentation disabled in production",
    }


# Include routers
app.include_router(access_routes.router, prefix="/api/access", tags=["Access"])
app.include_router(invite_routes.router, prefix="/api/invites", tags=["Invites"])
app.include_router(temp_password_routes.router, prefix="/api/temp-passwords", tags=["Temporary Passwords"])
app.include_router(audit_routes.router, prefix="/api/audit-logs", tags=["Audit Logs"])
