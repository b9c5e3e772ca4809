# =============================================================================
# tests/test_exceptions.py - Error Response Tests
# =============================================================================
# Every error leaves the API as {"error", "message", "suggestion"?, "details"?}.
#
# Run with: pytest tests/test_exceptions.py -v
# =============================================================================

from app.exceptions import (
    ExternalServiceError,
    PermissionDeniedError,
    PersonNotFoundError,
    ServiceNotConfiguredError,
)


class TestToDict:

    def test_not_found(self):
        exc = PersonNotFoundError("jane-doe-abc123")
        assert exc.status_code == 404
        assert exc.to_dict()["error"] == "PERSON_NOT_FOUND"

    def test_optional_keys_omitted(self):
        body = PermissionDeniedError("manage_roles").to_dict()
        assert body["details"] == {"permission": "manage_roles"}
        assert "suggestion" not in body

    def test_upstream_status_forwarded(self):
        assert ExternalServiceError("Stripe", "card declined", upstream_status=402).status_code == 402
        assert ExternalServiceError("Luma", "timeout").status_code == 502

    def test_not_configured(self):
        body = ServiceNotConfiguredError("Unsplash", "UNSPLASH_ACCESS_KEY").to_dict()
        assert body["error"] == "SERVICE_NOT_CONFIGURED"
        assert "UNSPLASH_ACCESS_KEY" in body["suggestion"]


class TestHandlers:

    def test_unknown_route_has_error_shape(self, client):
        response = client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.json()["error"] == "HTTP_ERROR"

    def test_missing_session(self, client, db):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["error"] == "NOT_AUTHENTICATED"

    def test_unsplash_without_key(self, client, db, make_user, auth_headers):
        response = client.get(
            "/api/unsplash/search", params={"query": "beach"}, headers=auth_headers(make_user())
        )

        assert response.status_code == 503
