from typing import List, Optional

from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from myplan.display import experience_type_badge
from myplan.exceptions import NotFoundError, PersistenceError
from myplan.experiences.schemas import ExperienceForm, ExperienceResponse, ExperienceSummary
from myplan.logging_config import get_logger
from myplan.models import Experience, ExperienceDetail, Image
from myplan.storage import FileStorageService

logger = get_logger(__name__)

IMAGE_FOLDER = "experiences"
EXPERIENCE_FIELDS = (
    "title", "description", "type", "location", "min_price", "max_price",
    "start_date", "end_date", "max_capacity", "lat", "long",
)


class ExperienceService:
    """Admin management of experiences, their slots and images"""

    def __init__(self, db: Session, storage: Optional[FileStorageService] = None):
        self.db = db
        self.storage = storage or FileStorageService()

    def list_experiences(self) -> List[ExperienceSummary]:
        experiences = self.db.query(Experience).order_by(Experience.added_at.desc()).all()
        return [
            ExperienceSummary(
                experience_id=e.experience_id,
                title=e.title,
                type=e.type,
                location=e.location,
                start_date=e.start_date,
                end_date=e.end_date,
                min_price=e.min_price,
                max_price=e.max_price,
                image_count=len(e.images),
                detail_count=len(e.details),
                first_image=e.images[0].attachment if e.images else None,
                type_badge=experience_type_badge(e.type),
            )
            for e in experiences
        ]

    def get_experience(self, experience_id: int) -> Experience:
        experience = self.db.query(Experience).filter(Experience.experience_id == experience_id).first()
        if not experience:
            raise NotFoundError("Experience not found.")
        return experience

    def create_experience(self, form: ExperienceForm, images: List[UploadFile]) -> Experience:
        """Insert the experience, its slots and images as one unit"""
        saved_paths = []
        experience = Experience(**{field: getattr(form, field) for field in EXPERIENCE_FIELDS})
        try:
            self.db.add(experience)
            self.db.flush()

            for detail in form.details:
                self.db.add(ExperienceDetail(
                    experience_id=experience.experience_id,
                    date=detail.date,
                    time=detail.time,
                    price=detail.price,
                    status="Active",
                ))

            saved_paths = self._attach_images(experience, images)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            self._discard(saved_paths)
            logger.exception("experience_create_failed", title=form.title)
            raise PersistenceError()
        except Exception:
            self.db.rollback()
            self._discard(saved_paths)
            raise

        self.db.refresh(experience)
        logger.info("experience_created", experience_id=experience.experience_id, images=len(saved_paths))
        return experience

    def update_experience(self, experience_id: int, form: ExperienceForm, images: List[UploadFile]) -> Experience:
        """Update fields and append new slots and images; existing slots are kept"""
        experience = self.get_experience(experience_id)
        saved_paths = []
        try:
            for field in EXPERIENCE_FIELDS:
                setattr(experience, field, getattr(form, field))

            for detail in form.details:
                if not detail.is_new:
                    continue
                self.db.add(ExperienceDetail(
                    experience_id=experience.experience_id,
                    date=detail.date,
                    time=detail.time,
                    price=detail.price,
                    status="Active",
                ))

            saved_paths = self._attach_images(experience, images)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            self._discard(saved_paths)
            logger.exception("experience_update_failed", experience_id=experience_id)
            raise PersistenceError()
        except Exception:
            self.db.rollback()
            self._discard(saved_paths)
            raise

        self.db.refresh(experience)
        logger.info("experience_updated", experience_id=experience_id)
        return experience

    def delete_experience(self, experience_id: int) -> None:
        experience = self.get_experience(experience_id)
        image_paths = [image.attachment for image in experience.images]

        try:
            for detail in list(experience.details):
                self.db.delete(detail)
            for image in list(experience.images):
                self.db.delete(image)
            self.db.delete(experience)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("experience_delete_failed", experience_id=experience_id)
            raise PersistenceError()

        self._discard(image_paths)
        logger.info("experience_deleted", experience_id=experience_id)

    def delete_image(self, image_id: int) -> None:
        image = self.db.query(Image).filter(Image.image_id == image_id).first()
        if not image:
            raise NotFoundError("Image not found.")

        path = image.attachment
        try:
            self.db.delete(image)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("experience_image_delete_failed", image_id=image_id)
            raise PersistenceError()

        self.storage.delete(path)

    def _attach_images(self, experience: Experience, images: List[UploadFile]) -> List[str]:
        saved_paths = []
        for upload in images:
            if not upload or not upload.filename:
                continue
            path = self.storage.save(upload, IMAGE_FOLDER)
            saved_paths.append(path)
            self.db.add(Image(experience_id=experience.experience_id, attachment=path))
        return saved_paths

    def _discard(self, paths: List[str]) -> None:
        for path in paths:
            self.storage.delete(path)

    @staticmethod
    def to_response(experience: Experience) -> ExperienceResponse:
        response = ExperienceResponse.model_validate(experience)
        response.type_badge = experience_type_badge(experience.type)
        return response
