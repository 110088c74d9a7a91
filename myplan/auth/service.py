from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from myplan.auth.schemas import RegisterRequest, UserRole, VisitorProfileUpdate
from myplan.auth.utils import get_password_hash, verify_password
from myplan.exceptions import NotFoundError, PersistenceError, ValidationError
from myplan.logging_config import get_logger
from myplan.models import User, Visitor

logger = get_logger(__name__)

INVALID_CREDENTIALS = "The provided credentials do not match our records."


class UserService:
    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email).first()

    @staticmethod
    def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
        return db.query(User).filter(User.user_id == user_id).first()

    @staticmethod
    def register_visitor(db: Session, request: RegisterRequest) -> User:
        """Create a visitor account and its profile in one transaction"""
        if UserService.get_user_by_email(db, request.email):
            raise ValidationError("This email is already registered")

        user = User(
            full_name=f"{request.first_name} {request.last_name}",
            email=request.email,
            password_hash=get_password_hash(request.password),
            role=UserRole.VISITOR.value,
        )
        try:
            db.add(user)
            db.flush()
            db.add(Visitor(
                user_id=user.user_id,
                first_name=request.first_name,
                last_name=request.last_name,
                phone=request.phone,
            ))
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ValidationError("This email is already registered")
        except SQLAlchemyError:
            db.rollback()
            logger.exception("visitor_registration_failed", email=request.email)
            raise PersistenceError()

        db.refresh(user)
        logger.info("visitor_registered", user_id=user.user_id)
        return user

    @staticmethod
    def authenticate(db: Session, email: str, password: str) -> User:
        user = UserService.get_user_by_email(db, email)
        if not user or not verify_password(password, user.password_hash):
            raise ValidationError(INVALID_CREDENTIALS)
        return user

    @staticmethod
    def get_visitor_profile(db: Session, user: User) -> Visitor:
        visitor = db.query(Visitor).filter(Visitor.user_id == user.user_id).first()
        if not visitor:
            raise NotFoundError("Visitor profile not found.")
        return visitor

    @staticmethod
    def update_visitor_profile(db: Session, user: User, update: VisitorProfileUpdate) -> Visitor:
        visitor = UserService.get_visitor_profile(db, user)

        for field, value in update.dict(exclude_unset=True).items():
            setattr(visitor, field, value)
        user.full_name = visitor.full_name

        try:
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("visitor_profile_update_failed", visitor_id=visitor.visitor_id)
            raise PersistenceError()

        db.refresh(visitor)
        return visitor
