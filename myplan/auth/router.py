from datetime import timedelta

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from myplan.auth.dependencies import get_current_user, require_visitor
from myplan.auth.schemas import (
    AuthResponse, LoginRequest, RegisterRequest, UserResponse, UserRole,
    VisitorProfile, VisitorProfileUpdate
)
from myplan.auth.service import UserService
from myplan.auth.utils import create_access_token
from myplan.config import settings
from myplan.database import get_db
from myplan.models import User

router = APIRouter()

REMEMBER_ME_DAYS = 30


def _profile_response(visitor, user: User) -> VisitorProfile:
    profile = VisitorProfile.model_validate(visitor)
    profile.email = user.email
    profile.image = user.image
    return profile


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """Register a new visitor account"""
    return UserService.register_visitor(db, request)


@router.post("/login", response_model=AuthResponse)
def login(login_data: LoginRequest, response: Response, db: Session = Depends(get_db)):
    """Authenticate and issue a token, also set as an http-only cookie"""
    user = UserService.authenticate(db, login_data.email, login_data.password)
    role = user.role or UserRole.VISITOR.value

    expires = (
        timedelta(days=REMEMBER_ME_DAYS) if login_data.remember_me
        else timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    access_token = create_access_token(
        data={"sub": str(user.user_id), "email": user.email, "name": user.full_name, "role": role},
        expires_delta=expires
    )
    response.set_cookie(
        settings.AUTH_COOKIE_NAME,
        access_token,
        httponly=True,
        samesite="lax",
        max_age=int(expires.total_seconds()),
    )

    redirect_to = "/admin/dashboard" if role == UserRole.ADMIN.value else "/"
    return AuthResponse(access_token=access_token, redirect_to=redirect_to, user=user)


@router.post("/logout")
def logout(response: Response):
    """Clear the session cookie"""
    response.delete_cookie(settings.AUTH_COOKIE_NAME)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserResponse)
def read_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.get("/profile", response_model=VisitorProfile)
def read_profile(current_user: User = Depends(require_visitor), db: Session = Depends(get_db)):
    visitor = UserService.get_visitor_profile(db, current_user)
    return _profile_response(visitor, current_user)


@router.put("/profile", response_model=VisitorProfile)
def update_profile(
    update: VisitorProfileUpdate,
    current_user: User = Depends(require_visitor),
    db: Session = Depends(get_db)
):
    visitor = UserService.update_visitor_profile(db, current_user, update)
    return _profile_response(visitor, current_user)
