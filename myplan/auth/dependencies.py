from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from myplan.auth.service import UserService
from myplan.auth.utils import verify_token
from myplan.config import settings
from myplan.database import get_db
from myplan.models import Admin, User, Visitor

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login", auto_error=False)


def get_token_data(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
) -> dict:
    """Decode the bearer token, or the session cookie, into its principal claims"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    token = token or request.cookies.get(settings.AUTH_COOKIE_NAME)
    if not token:
        raise credentials_exception

    return verify_token(token, credentials_exception)


def get_current_user(
    token_data: dict = Depends(get_token_data),
    db: Session = Depends(get_db)
) -> User:
    """Resolve the caller from the bearer token or the session cookie"""
    user = UserService.get_user_by_id(db, user_id=token_data["user_id"])
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


def require_roles(*roles: str):
    """Build a dependency that admits only callers whose token role is in ``roles``"""
    allowed = set(roles)

    def guard(
        token_data: dict = Depends(get_token_data),
        current_user: User = Depends(get_current_user)
    ) -> User:
        if token_data["role"] not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions"
            )
        return current_user

    return guard


require_admin = require_roles("admin")
require_visitor = require_roles("visitor")


def get_current_visitor(
    current_user: User = Depends(require_visitor),
    db: Session = Depends(get_db)
) -> Visitor:
    visitor = db.query(Visitor).filter(Visitor.user_id == current_user.user_id).first()
    if visitor is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Visitor profile required"
        )
    return visitor


def get_current_admin(
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
) -> Admin:
    admin = db.query(Admin).filter(Admin.user_id == current_user.user_id).first()
    if admin is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin profile required"
        )
    return admin
