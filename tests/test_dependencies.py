"""Tests for the access policy gates."""

import pytest
from fastapi import HTTPException
from starlette.requests import Request

from blogspace.dependencies import (
    AccessPolicy,
    get_bearer_token,
    get_current_user,
    is_allowed,
    require_admin,
    require_owner,
    require_owner_or_admin,
)
from blogspace.services.jwt import TokenIdentity, get_jwt_service

ALICE = TokenIdentity(user_id=1, is_admin=False)
BOB = TokenIdentity(user_id=2, is_admin=False)
ADMIN_ALICE = TokenIdentity(user_id=1, is_admin=True)


def _request(headers: dict[str, str]) -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in headers.items()]
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw})


@pytest.mark.parametrize(
    "policy,identity,target,expected",
    [
        (AccessPolicy.AUTHENTICATED, ALICE, None, True),
        (AccessPolicy.OWNER, ALICE, 1, True),
        (AccessPolicy.OWNER, ALICE, 2, False),
        (AccessPolicy.OWNER, ADMIN_ALICE, 2, False),
        (AccessPolicy.OWNER_OR_ADMIN, ALICE, 2, False),
        (AccessPolicy.OWNER_OR_ADMIN, ADMIN_ALICE, 2, True),
        (AccessPolicy.OWNER_OR_ADMIN, BOB, 2, True),
        (AccessPolicy.ADMIN, ALICE, None, False),
        (AccessPolicy.ADMIN, ADMIN_ALICE, None, True),
    ],
)
def test_is_allowed(policy: AccessPolicy, identity: TokenIdentity, target: int | None, expected: bool):
    """Policy table."""
    assert is_allowed(policy, identity, target) is expected


class TestGates:
    """Dependencies raise 403 for a valid identity without the privilege."""

    def test_owner_only_forbids_other_user(self):
        """Non-admin A on B's resource under owner-only is forbidden."""
        with pytest.raises(HTTPException) as exc:
            require_owner(user_id=BOB.user_id, user=ALICE)
        assert exc.value.status_code == 403

    def test_owner_or_admin_admits_admin(self):
        """The same request passes owner-or-admin once A is an admin."""
        assert require_owner_or_admin(user_id=BOB.user_id, user=ADMIN_ALICE) == ADMIN_ALICE

    def test_admin_only(self):
        with pytest.raises(HTTPException) as exc:
            require_admin(user=BOB)
        assert exc.value.status_code == 403
        assert require_admin(user=ADMIN_ALICE) == ADMIN_ALICE


class TestBearerExtraction:
    """Reading the Authorization header."""

    def test_missing(self):
        assert get_bearer_token(_request({})) is None

    def test_wrong_scheme(self):
        assert get_bearer_token(_request({"Authorization": "Basic dXNlcjpwYXNz"})) is None

    def test_empty_token(self):
        assert get_bearer_token(_request({"Authorization": "Bearer "})) is None

    def test_case_insensitive_scheme(self):
        assert get_bearer_token(_request({"Authorization": "bearer abc"})) == "abc"

    def test_identity_attached_to_request(self):
        """A valid token resolves to its identity and is stored on request.state."""
        token = get_jwt_service().create_token(user_id=5, is_admin=True)
        request = _request({"Authorization": f"Bearer {token}"})
        identity = get_current_user(request)
        assert identity == TokenIdentity(user_id=5, is_admin=True)
        assert request.state.user == identity

    def test_missing_token_is_401(self):
        with pytest.raises(HTTPException) as exc:
            get_current_user(_request({}))
        assert exc.value.status_code == 401
