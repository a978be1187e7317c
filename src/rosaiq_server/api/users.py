"""
User management API router. Admin only.
"""
from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_admin
from ..models.user import User
from ..schemas.auth import UserCreate, UserResponse, UserUpdate
from ..services import auth_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=List[UserResponse])
def list_users(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return auth_service.list_users(db)


@router.post("", response_model=UserResponse, status_code=201)
def create_user(body: UserCreate, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    """Create a dashboard account. Duplicate usernames return 409."""
    return auth_service.create_user(db, body.username, body.password, role=body.role)


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    body: UserUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return auth_service.update_user(db, user_id, password=body.password, role=body.role)


@router.delete("/{user_id}", status_code=204)
def delete_user(user_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    """Delete an account; devices it owned become unassigned."""
    auth_service.delete_user(db, admin, user_id)
    return Response(status_code=204)
