"""Authentication and authorization dependencies for FastAPI routes.

Each access policy is a dependency that can be put in front of any route:

- public routes take no dependency,
- ``get_current_user`` admits any valid bearer token,
- ``require_owner`` / ``require_owner_or_admin`` compare the token's user with
  the ``user_id`` path parameter,
- ``require_admin`` admits admins only.

A missing or bad token is a 401; a valid token without the privilege is a 403.
"""

from enum import Enum

from fastapi import Depends, HTTPException, Request

from blogspace.services.jwt import TokenIdentity, get_jwt_service

CurrentUser = TokenIdentity


class AccessPolicy(str, Enum):
    AUTHENTICATED = "authenticated"
    OWNER = "owner"
    OWNER_OR_ADMIN = "owner_or_admin"
    ADMIN = "admin"


def is_allowed(policy: AccessPolicy, identity: CurrentUser, target_user_id: int | None = None) -> bool:
    """Evaluate a policy gate for an already authenticated identity."""
    is_owner = target_user_id is not None and identity.user_id == target_user_id
    if policy is AccessPolicy.AUTHENTICATED:
        return True
    if policy is AccessPolicy.OWNER:
        return is_owner
    if policy is AccessPolicy.OWNER_OR_ADMIN:
        return is_owner or identity.is_admin
    if policy is AccessPolicy.ADMIN:
        return identity.is_admin
    return False


def get_bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_user(request: Request) -> CurrentUser:
    """Extract and validate the caller from the Bearer token. Raises 401 if invalid."""
    token = get_bearer_token(request)
    if not token:
        raise HTTPException(
            status_code=401,
            detail="No token provided, access denied",
            headers={"WWW-Authenticate": "Bearer"},
        )

    identity = get_jwt_service().verify_token(token)
    if identity is None:
        raise HTTPException(
            status_code=401,
            detail="Invalid or expired token, access denied",
            headers={"WWW-Authenticate": "Bearer"},
        )

    request.state.user = identity
    return identity


def require_owner(user_id: int, user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Only the user named by the ``user_id`` path parameter."""
    if not is_allowed(AccessPolicy.OWNER, user, user_id):
        raise HTTPException(status_code=403, detail="Not allowed, only the account owner")
    return user


def require_owner_or_admin(user_id: int, user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """The user named by the ``user_id`` path parameter, or any admin."""
    if not is_allowed(AccessPolicy.OWNER_OR_ADMIN, user, user_id):
        raise HTTPException(status_code=403, detail="Not allowed, only the account owner or an admin")
    return user


def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Admins only."""
    if not is_allowed(AccessPolicy.ADMIN, user):
        raise HTTPException(status_code=403, detail="Not allowed, admin only")
    return user
