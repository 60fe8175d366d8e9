"""
Integration tests for the Business Access Control API.

Tests complete workflows across multiple endpoints and the full stack
(routes → services → repositories → database).
"""

import pytest

from app.config import settings
from tests.conftest import headers_for


def create_invite(client, headers, **body):
    response = client.post("/api/invites", headers=headers, json=body)
    assert response.status_code == 201, response.json()
    return response.json()


class TestInviteWorkflow:
    """Integration tests for the invite lifecycle over HTTP"""

    def test_owner_invites_seller_who_joins(self, client, owner_headers):
        """Owner generates a code → new user claims it → code is used up"""

        # Step 1: Owner generates a single-use seller invite
        invite = create_invite(client, owner_headers)
        assert invite["role"] == "seller"
        assert invite["tenant_id"] == "tenant-1"
        assert invite["max_uses"] == 1
        assert invite["state"] == "active"
        assert invite["usable"] is True

        # Step 2: It shows up in the tenant's invite list
        listing = client.get("/api/invites", headers=owner_headers).json()
        assert listing["total"] == 1
        assert listing["invites"][0]["code"] == invite["code"]

        # Step 3: A new user previews and claims it (lowercase is fine)
        newcomer = headers_for(user_id="new-user", role="viewer", tenant_id=None, tenant_type=None)
        preview = client.get(f"/api/invites/{invite['code'].lower()}", headers=newcomer)
        assert preview.status_code == 200
        assert preview.json()["usable"] is True

        claim = client.post("/api/invites/claim", headers=newcomer, json={"code": invite["code"].lower()})
        assert claim.status_code == 200
        assert claim.json() == {
            "code": invite["code"],
            "tenant_id": "tenant-1",
            "role": "seller",
            "used_by": "new-user",
            "used_count": 1,
        }

        # Step 4: The code is exhausted for everybody else
        late = headers_for(user_id="late-user", role="viewer", tenant_id=None, tenant_type=None)
        response = client.post("/api/invites/claim", headers=late, json={"code": invite["code"]})
        assert response.status_code == 410
        assert response.json()["reason"] == "INVITE_EXHAUSTED"

        state = client.get(f"/api/invites/{invite['code']}", headers=late).json()
        assert state["state"] == "used"
        assert state["usable"] is False

    def test_unknown_code(self, client, seller_headers):
        response = client.post("/api/invites/claim", headers=seller_headers, json={"code": "NOP-0000"})
        assert response.status_code == 404
        assert response.json()["reason"] == "INVITE_NOT_FOUND"

    def test_claim_requires_authentication(self, client, owner_headers):
        invite = create_invite(client, owner_headers)
        response = client.post("/api/invites/claim", json={"code": invite["code"]})
        assert response.status_code == 401

    def test_revoke_then_claim(self, client, owner_headers, seller_headers):
        invite = create_invite(client, owner_headers, max_uses=None)

        revoked = client.post(f"/api/invites/{invite['code']}/revoke", headers=owner_headers)
        assert revoked.status_code == 200
        assert revoked.json()["state"] == "revoked"

        # Revoking again is not an error
        again = client.post(f"/api/invites/{invite['code']}/revoke", headers=owner_headers)
        assert again.status_code == 200

        response = client.post("/api/invites/claim", headers=seller_headers, json={"code": invite["code"]})
        assert response.status_code == 410
        assert response.json()["reason"] == "INVITE_REVOKED"

    def test_custom_limits(self, client, owner_headers):
        invite = create_invite(client, owner_headers, role="viewer", max_uses=3, ttl_days=2)
        assert invite["max_uses"] == 3
        assert invite["role"] == "viewer"

    def test_default_limit_comes_from_settings(self, client, owner_headers, monkeypatch):
        monkeypatch.setattr(settings, "INVITE_DEFAULT_MAX_USES", 5)
        invite = create_invite(client, owner_headers)
        assert invite["max_uses"] == 5

    @pytest.mark.parametrize("body", [{"max_uses": 0}, {"ttl_days": 0}, {"role": "emperor"}])
    def test_invalid_body(self, client, owner_headers, body):
        response = client.post("/api/invites", headers=owner_headers, json=body)
        assert response.status_code == 422


class TestInvitePermissions:
    """Who may invite whom"""

    def test_manager_invites_below_own_rank(self, client, manager_headers):
        invite = create_invite(client, manager_headers, role="seller")
        assert invite["created_by"] == "manager-1"

    def test_manager_cannot_invite_manager(self, client, manager_headers):
        response = client.post("/api/invites", headers=manager_headers, json={"role": "manager"})
        assert response.status_code == 403
        assert response.json()["reason"] == "PERMISSION_DENIED"

    def test_owner_can_invite_owner(self, client, owner_headers):
        assert create_invite(client, owner_headers, role="owner")["role"] == "owner"

    def test_nobody_invites_super_admin(self, client, owner_headers, super_admin_headers):
        body = {"role": "super_admin", "tenant_id": "tenant-1"}
        assert client.post("/api/invites", headers=owner_headers, json=body).status_code == 403
        assert client.post("/api/invites", headers=super_admin_headers, json=body).status_code == 403

    def test_seller_cannot_manage_invites(self, client, seller_headers):
        response = client.post("/api/invites", headers=seller_headers, json={"role": "viewer"})
        assert response.status_code == 403
        assert response.json()["reason"] == "PERMISSION_DENIED"
        assert client.get("/api/invites", headers=seller_headers).status_code == 403

    def test_permission_override_allows_seller(self, client):
        headers = headers_for(user_id="seller-2", role="seller", permissions={"manage_invites": True})
        assert create_invite(client, headers, role="viewer")["created_by"] == "seller-2"

    def test_owner_cannot_target_other_tenant(self, client, owner_headers):
        response = client.post("/api/invites", headers=owner_headers, json={"tenant_id": "tenant-2"})
        assert response.status_code == 403

    def test_super_admin_targets_any_tenant(self, client, super_admin_headers):
        invite = create_invite(client, super_admin_headers, role="owner", tenant_id="tenant-9")
        assert invite["tenant_id"] == "tenant-9"

    def test_super_admin_needs_a_target_tenant(self, client, super_admin_headers):
        response = client.post("/api/invites", headers=super_admin_headers, json={"role": "owner"})
        assert response.status_code == 400


class TestTenantIsolation:
    def test_other_tenant_cannot_revoke(self, client, owner_headers, other_owner_headers):
        invite = create_invite(client, owner_headers)

        response = client.post(f"/api/invites/{invite['code']}/revoke", headers=other_owner_headers)
        assert response.status_code == 404

        assert client.get(f"/api/invites/{invite['code']}", headers=owner_headers).json()["state"] == "active"

    def test_lists_are_per_tenant(self, client, owner_headers, other_owner_headers):
        create_invite(client, owner_headers)
        create_invite(client, owner_headers)
        create_invite(client, other_owner_headers)

        assert client.get("/api/invites", headers=owner_headers).json()["total"] == 2
        assert client.get("/api/invites", headers=other_owner_headers).json()["total"] == 1


class TestTempPasswordWorkflow:
    def test_issue_validate_redeem(self, client, owner_headers):
        issued = client.post("/api/temp-passwords", headers=owner_headers, json={"user_id": "user-9"})
        assert issued.status_code == 201
        secret = issued.json()["temp_password"]
        assert issued.json()["expires_at"]

        body = {"user_id": "user-9", "temp_password": secret}
        validated = client.post("/api/temp-passwords/validate", json=body)
        assert validated.json() == {"valid": True, "reason": None, "tenant_id": "tenant-1"}

        redeemed = client.post("/api/temp-passwords/redeem", json=body)
        assert redeemed.status_code == 200
        assert redeemed.json()["valid"] is True

        again = client.post("/api/temp-passwords/redeem", json=body)
        assert again.status_code == 401
        assert again.json()["reason"] == "TEMP_PASSWORD_ALREADY_USED"

    def test_wrong_secret(self, client, owner_headers):
        client.post("/api/temp-passwords", headers=owner_headers, json={"user_id": "user-9"})

        response = client.post(
            "/api/temp-passwords/redeem", json={"user_id": "user-9", "temp_password": "guess"}
        )
        assert response.status_code == 401
        assert response.json()["reason"] == "TEMP_PASSWORD_MISMATCH"

    def test_validate_unknown_user(self, client):
        response = client.post(
            "/api/temp-passwords/validate", json={"user_id": "ghost", "temp_password": "x"}
        )
        assert response.status_code == 200
        assert response.json() == {"valid": False, "reason": "TEMP_PASSWORD_NOT_FOUND", "tenant_id": None}

    @pytest.mark.parametrize("fixture", ["manager_headers", "seller_headers", "viewer_headers"])
    def test_only_permitted_roles_issue(self, client, request, fixture):
        headers = request.getfixturevalue(fixture)
        response = client.post("/api/temp-passwords", headers=headers, json={"user_id": "user-9"})
        assert response.status_code == 403

    def test_redeem_names_issuing_tenant(self, client, owner_headers):
        issued = client.post("/api/temp-passwords", headers=owner_headers, json={"user_id": "user-9"}).json()
        assert issued["tenant_id"] == "tenant-1"

        redeemed = client.post(
            "/api/temp-passwords/redeem",
            json={"user_id": "user-9", "temp_password": issued["temp_password"]},
        )
        assert redeemed.json() == {"valid": True, "reason": None, "tenant_id": "tenant-1"}

    def test_owner_sees_own_temp_password_activity(self, client, owner_headers):
        """Issue and redeem land in the issuing tenant's audit view"""
        issued = client.post("/api/temp-passwords", headers=owner_headers, json={"user_id": "seller-9"})
        client.post(
            "/api/temp-passwords/redeem",
            json={"user_id": "seller-9", "temp_password": issued.json()["temp_password"]},
        )

        entries = client.get("/api/audit-logs", headers=owner_headers).json()["entries"]
        assert [e["action"] for e in entries] == ["temp_password_redeemed", "temp_password_issued"]
        assert {e["tenant_id"] for e in entries} == {"tenant-1"}
        assert entries[1]["details"]["issued_by"] == "owner-1"

    def test_other_tenant_cannot_replace(self, client, owner_headers, other_owner_headers):
        first = client.post("/api/temp-passwords", headers=owner_headers, json={"user_id": "seller-9"})

        response = client.post("/api/temp-passwords", headers=other_owner_headers, json={"user_id": "seller-9"})
        assert response.status_code == 403

        # The original secret still works
        redeemed = client.post(
            "/api/temp-passwords/redeem",
            json={"user_id": "seller-9", "temp_password": first.json()["temp_password"]},
        )
        assert redeemed.status_code == 200

    def test_platform_record_not_replaceable_by_tenant(self, client, owner_headers, super_admin_headers):
        client.post("/api/temp-passwords", headers=super_admin_headers, json={"user_id": "admin-2"})

        response = client.post("/api/temp-passwords", headers=owner_headers, json={"user_id": "admin-2"})
        assert response.status_code == 403

    def test_super_admin_replaces_any(self, client, owner_headers, super_admin_headers):
        client.post("/api/temp-passwords", headers=owner_headers, json={"user_id": "seller-9"})

        response = client.post("/api/temp-passwords", headers=super_admin_headers, json={"user_id": "seller-9"})
        assert response.status_code == 201
        assert response.json()["tenant_id"] is None


class TestAuditLogs:
    def test_owner_sees_own_tenant_only(self, client, owner_headers, other_owner_headers):
        create_invite(client, owner_headers)
        create_invite(client, other_owner_headers)

        response = client.get("/api/audit-logs", headers=owner_headers)
        assert response.status_code == 200
        entries = response.json()["entries"]
        assert [e["action"] for e in entries] == ["invite_created"]
        assert entries[0]["tenant_id"] == "tenant-1"

        # Asking for another tenant still yields only the caller's tenant
        response = client.get("/api/audit-logs?tenant_id=tenant-2", headers=owner_headers)
        assert {e["tenant_id"] for e in response.json()["entries"]} == {"tenant-1"}

    def test_super_admin_sees_everything(self, client, owner_headers, other_owner_headers, super_admin_headers):
        create_invite(client, owner_headers)
        create_invite(client, other_owner_headers)

        response = client.get("/api/audit-logs?action=invite_created", headers=super_admin_headers)
        assert response.json()["total"] == 2

    def test_denials_show_up(self, client, owner_headers, seller_headers):
        client.get("/api/invites", headers=seller_headers)

        entries = client.get("/api/audit-logs?action=access_denied", headers=owner_headers).json()["entries"]
        assert len(entries) == 1
        assert entries[0]["user_id"] == "seller-1"
        assert entries[0]["details"]["reason"] == "PERMISSION_DENIED"
        assert entries[0]["details"]["resource"] == "GET /api/invites"

    def test_manager_cannot_read_audit_logs(self, client, manager_headers):
        assert client.get("/api/audit-logs", headers=manager_headers).status_code == 403


class TestEvaluateEndpoint:
    def test_anonymous_redirected_to_login(self, client):
        response = client.post("/api/access/evaluate", json={"required_roles": ["manager"]})
        assert response.status_code == 200
        assert response.json() == {"outcome": "deny", "reason_code": "AUTH_REQUIRED", "redirect_hint": "login"}

    def test_public_resource(self, client):
        response = client.post("/api/access/evaluate", json={"allow_unauthenticated": True})
        assert response.json()["outcome"] == "allow"
        assert response.json()["reason_code"] == "PUBLIC_ACCESS"

    def test_pending_while_loading(self, client, owner_headers):
        response = client.post("/api/access/evaluate", headers=owner_headers, json={"auth_loading": True})
        assert response.json()["outcome"] == "pending"

    def test_role_mismatch(self, client, seller_headers):
        response = client.post(
            "/api/access/evaluate",
            headers=seller_headers,
            json={"required_roles": ["manager"], "resource": "/reports"},
        )
        assert response.json() == {
            "outcome": "deny",
            "reason_code": "ROLE_MISMATCH",
            "redirect_hint": "access_denied",
        }

    def test_tenant_type_mismatch(self, client, manager_headers):
        response = client.post(
            "/api/access/evaluate", headers=manager_headers, json={"required_tenant_type": "education"}
        )
        assert response.json()["reason_code"] == "TENANT_TYPE_MISMATCH"

    def test_unknown_permission_rejected(self, client, owner_headers):
        response = client.post(
            "/api/access/evaluate", headers=owner_headers, json={"required_permission": "launch_rockets"}
        )
        assert response.status_code == 422

    def test_permission_catalog_listing(self, client, viewer_headers):
        response = client.get("/api/access/permissions", headers=viewer_headers)
        assert response.status_code == 200
        catalog = {entry["key"]: entry for entry in response.json()}
        assert "manage_invites" in catalog
        assert set(catalog["manage_invites"]["roles"]) == {"super_admin", "owner", "manager"}
        assert catalog["system_settings"]["scope"] == "global"
        assert catalog["system_settings"]["roles"] == ["super_admin"]
