"""User profile API endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from blogspace.database import get_db
from blogspace.dependencies import CurrentUser, require_admin, require_owner, require_owner_or_admin
from blogspace.schemas.auth import MessageResponse
from blogspace.schemas.user import UserCountResponse, UserListResponse, UserResponse, UserUpdateRequest
from blogspace.services.user import get_user_service

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


@router.get("/profile", response_model=UserListResponse)
def list_users(
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> UserListResponse:
    """List all user profiles (admin only)."""
    users = get_user_service().list_users(db)
    return UserListResponse(
        items=[UserResponse.model_validate(u) for u in users],
        total=len(users),
    )


@router.get("/count", response_model=UserCountResponse)
def count_users(
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> UserCountResponse:
    """Number of registered users (admin only)."""
    return UserCountResponse(count=get_user_service().count_users(db))


@router.get("/profile/{user_id}", response_model=UserResponse)
def get_user_profile(user_id: int, db: Session = Depends(get_db)) -> UserResponse:
    """Get a single user profile."""
    user = get_user_service().get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return UserResponse.model_validate(user)


@router.put("/profile/{user_id}", response_model=UserResponse)
def update_user_profile(
    user_id: int,
    body: UserUpdateRequest,
    owner: CurrentUser = Depends(require_owner),
    db: Session = Depends(get_db),
) -> UserResponse:
    """Update the caller's own profile."""
    service = get_user_service()
    user = service.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    user = service.update_profile(db, user, username=body.username, bio=body.bio, password=body.password)
    return UserResponse.model_validate(user)


@router.delete("/profile/{user_id}", response_model=MessageResponse)
def delete_user_profile(
    user_id: int,
    caller: CurrentUser = Depends(require_owner_or_admin),
    db: Session = Depends(get_db),
) -> MessageResponse:
    """Delete an account (the owner or an admin)."""
    service = get_user_service()
    user = service.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    service.delete_user(db, user)
    return MessageResponse(message="Account deleted successfully")
