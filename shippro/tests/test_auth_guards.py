"""
Session and role policy tests.
"""

from datetime import timedelta

import pytest
from jose import jwt

from shippro.app.core.dependencies import Principal, principal_from_claims
from shippro.app.core.guards import AccessDecision, evaluate_access
from shippro.app.core.jwt import create_access_token, decode_access_token
from shippro.app.models.enums import UserRole


# TEST 1: Policy

def test_policy_matrix():
    admin = Principal(user_id="u1", role="admin")
    user = Principal(user_id="u2", role="user")
    no_role = Principal(user_id="u3")

    assert evaluate_access(None) == AccessDecision.NOT_AUTHENTICATED
    assert evaluate_access(None, UserRole.ADMIN) == AccessDecision.NOT_AUTHENTICATED
    assert evaluate_access(user) == AccessDecision.ALLOW
    assert evaluate_access(no_role) == AccessDecision.ALLOW
    assert evaluate_access(admin, UserRole.ADMIN) == AccessDecision.ALLOW
    assert evaluate_access(user, UserRole.ADMIN) == AccessDecision.DENY
    assert evaluate_access(no_role, UserRole.ADMIN) == AccessDecision.DENY


# TEST 2: Claims

def test_role_comes_from_public_metadata():
    principal = principal_from_claims({"sub": "u1", "email": "a@b.co", "public_metadata": {"role": "admin"}})
    assert principal.user_id == "u1"
    assert principal.email == "a@b.co"
    assert principal.role == "admin"


def test_claims_without_subject_are_rejected():
    assert principal_from_claims({"email": "a@b.co"}) is None


def test_expired_and_tampered_tokens_decode_to_none():
    expired = create_access_token({"sub": "u1"}, expires_delta=timedelta(seconds=-5))
    assert decode_access_token(expired) is None

    token = create_access_token({"sub": "u1"})
    assert decode_access_token(token)["sub"] == "u1"

    forged = jwt.encode({"sub": "u1", "public_metadata": {"role": "admin"}}, "another-secret", algorithm="HS256")
    assert decode_access_token(forged) is None


# TEST 3: Endpoints

@pytest.mark.asyncio
async def test_admin_routes_reject_regular_users(client, user_headers):
    for path in ("/api/admin/stats", "/api/admin/vehicles/stats", "/api/contact"):
        response = await client.get(path, headers=user_headers)
        assert response.status_code == 403, path
        assert response.json()["error"] == "Forbidden"


@pytest.mark.asyncio
async def test_missing_token_is_401(client):
    response = await client.get("/api/admin/stats")
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized", "error_code": "ERR_AUTH_001", "details": {}}


@pytest.mark.asyncio
async def test_expired_token_is_401(client):
    expired = create_access_token(
        {"sub": "u1", "public_metadata": {"role": "admin"}}, expires_delta=timedelta(seconds=-5)
    )
    response = await client.get("/api/admin/stats", headers={"Authorization": f"Bearer {expired}"})
    assert response.status_code == 401
