from typing import List, Optional, Tuple

from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from myplan.display import highlight_creator_display, time_ago, truncate
from myplan.exceptions import NotFoundError, PersistenceError, ValidationError
from myplan.highlights.schemas import (
    AdminAuthor, HighlightAuthor, HighlightCreate, HighlightResponse, HighlightUpdate,
    VisitorAuthor
)
from myplan.logging_config import get_logger
from myplan.models import Highlight
from myplan.storage import FileStorageService

logger = get_logger(__name__)

IMAGE_FOLDER = "highlights"


def author_of(highlight: Highlight) -> Optional[HighlightAuthor]:
    if highlight.admin_id is not None:
        return AdminAuthor(admin_id=highlight.admin_id)
    if highlight.visitor_id is not None:
        return VisitorAuthor(visitor_id=highlight.visitor_id)
    return None


def resolve_creator(highlight: Highlight) -> Tuple[str, str, Optional[str]]:
    """(name, type, email) of the author, 'Unknown' when it cannot be resolved"""
    author = author_of(highlight)
    profile = None
    if isinstance(author, AdminAuthor):
        profile = highlight.admin
    elif isinstance(author, VisitorAuthor):
        profile = highlight.visitor

    if profile is None:
        return "Unknown", "Unknown", None

    email = profile.user.email if profile.user else None
    return profile.full_name, author.kind, email


class HighlightService:
    def __init__(self, db: Session, storage: Optional[FileStorageService] = None):
        self.db = db
        self.storage = storage or FileStorageService()

    def list_highlights(self) -> List[HighlightResponse]:
        highlights = self.db.query(Highlight).order_by(Highlight.highlight_time.desc()).all()
        return [self.to_response(h) for h in highlights]

    def get_highlight(self, highlight_id: int) -> Highlight:
        highlight = self.db.query(Highlight).filter(Highlight.highlight_id == highlight_id).first()
        if not highlight:
            raise NotFoundError("Highlight not found.")
        return highlight

    def create_highlight(
        self,
        author: HighlightAuthor,
        request: HighlightCreate,
        image: Optional[UploadFile] = None
    ) -> Highlight:
        highlight = Highlight(
            title=request.title,
            content=request.content,
            description=request.description,
            admin_id=author.admin_id if isinstance(author, AdminAuthor) else None,
            visitor_id=author.visitor_id if isinstance(author, VisitorAuthor) else None,
        )
        saved_path = None
        if image is not None and image.filename:
            saved_path = self.storage.save(image, IMAGE_FOLDER)
            highlight.image = saved_path

        try:
            self.db.add(highlight)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            self.storage.delete(saved_path)
            logger.exception("highlight_create_failed", author=author.kind)
            raise PersistenceError()

        self.db.refresh(highlight)
        logger.info("highlight_created", highlight_id=highlight.highlight_id, author=author.kind)
        return highlight

    def update_own_highlight(self, visitor_id: int, highlight_id: int, request: HighlightUpdate) -> Highlight:
        highlight = self._get_owned(visitor_id, highlight_id)
        for field, value in request.dict(exclude_unset=True).items():
            setattr(highlight, field, value)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("highlight_update_failed", highlight_id=highlight_id)
            raise PersistenceError()
        self.db.refresh(highlight)
        return highlight

    def delete_own_highlight(self, visitor_id: int, highlight_id: int) -> None:
        self._delete([self._get_owned(visitor_id, highlight_id)])

    def delete_highlight(self, highlight_id: int) -> None:
        self._delete([self.get_highlight(highlight_id)])

    def bulk_delete(self, ids: List[int]) -> int:
        if not ids:
            raise ValidationError("No highlights selected for deletion.")
        highlights = self.db.query(Highlight).filter(Highlight.highlight_id.in_(ids)).all()
        if not highlights:
            raise NotFoundError("No highlights found.")
        self._delete(highlights)
        return len(highlights)

    def _get_owned(self, visitor_id: int, highlight_id: int) -> Highlight:
        highlight = self.db.query(Highlight).filter(
            Highlight.highlight_id == highlight_id,
            Highlight.visitor_id == visitor_id
        ).first()
        if not highlight:
            raise NotFoundError("Highlight not found.")
        return highlight

    def _delete(self, highlights: List[Highlight]) -> None:
        image_paths = [h.image for h in highlights if h.image]
        try:
            for highlight in highlights:
                self.db.delete(highlight)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("highlight_delete_failed", count=len(highlights))
            raise PersistenceError()

        for path in image_paths:
            self.storage.delete(path)
        logger.info("highlights_deleted", count=len(highlights))

    @staticmethod
    def to_response(highlight: Highlight) -> HighlightResponse:
        name, creator_type, email = resolve_creator(highlight)
        badge, icon = highlight_creator_display(creator_type)
        return HighlightResponse(
            highlight_id=highlight.highlight_id,
            title=highlight.title,
            content=highlight.content,
            short_content=truncate(highlight.content),
            description=highlight.description,
            image=highlight.image,
            highlight_time=highlight.highlight_time,
            time_ago=time_ago(highlight.highlight_time),
            author=author_of(highlight),
            created_by=name,
            created_by_type=creator_type,
            created_by_email=email,
            creator_badge=badge,
            creator_icon=icon,
        )
