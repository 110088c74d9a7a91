import json
from datetime import date
from decimal import Decimal
from typing import List, Optional

import pydantic
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.exceptions import RequestValidationError
from sqlalchemy.orm import Session

from myplan.auth.dependencies import require_admin
from myplan.database import get_db
from myplan.experiences.schemas import ExperienceForm, ExperienceResponse, ExperienceSummary
from myplan.experiences.service import ExperienceService
from myplan.storage import FileStorageService, get_storage

router = APIRouter(dependencies=[Depends(require_admin)])


def experience_form(
    title: str = Form(...),
    description: str = Form(...),
    type: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    min_price: Decimal = Form(0),
    max_price: Decimal = Form(0),
    start_date: date = Form(...),
    end_date: date = Form(...),
    max_capacity: int = Form(...),
    lat: Optional[float] = Form(None),
    long: Optional[float] = Form(None),
    details: str = Form("[]", description="JSON list of {experience_detail_id?, date, time?, price}"),
) -> ExperienceForm:
    """Collect multipart form fields into a validated ExperienceForm"""
    try:
        parsed_details = json.loads(details or "[]")
    except json.JSONDecodeError:
        raise RequestValidationError([{
            "loc": ("body", "details"), "msg": "details must be a JSON list", "type": "value_error"
        }])

    try:
        return ExperienceForm(
            title=title, description=description, type=type, location=location,
            min_price=min_price, max_price=max_price, start_date=start_date, end_date=end_date,
            max_capacity=max_capacity, lat=lat, long=long, details=parsed_details,
        )
    except pydantic.ValidationError as e:
        raise RequestValidationError(e.errors())


@router.get("", response_model=List[ExperienceSummary])
def list_experiences(db: Session = Depends(get_db)):
    """All experiences with image/slot counts"""
    return ExperienceService(db).list_experiences()


@router.post("", response_model=ExperienceResponse, status_code=status.HTTP_201_CREATED)
def create_experience(
    form: ExperienceForm = Depends(experience_form),
    images: List[UploadFile] = File(default=[]),
    db: Session = Depends(get_db),
    storage: FileStorageService = Depends(get_storage)
):
    service = ExperienceService(db, storage)
    return service.to_response(service.create_experience(form, images))


@router.get("/{experience_id}", response_model=ExperienceResponse)
def get_experience(experience_id: int, db: Session = Depends(get_db)):
    service = ExperienceService(db)
    return service.to_response(service.get_experience(experience_id))


@router.put("/{experience_id}", response_model=ExperienceResponse)
def update_experience(
    experience_id: int,
    form: ExperienceForm = Depends(experience_form),
    images: List[UploadFile] = File(default=[]),
    db: Session = Depends(get_db),
    storage: FileStorageService = Depends(get_storage)
):
    """Update an experience; existing slots are never removed"""
    service = ExperienceService(db, storage)
    return service.to_response(service.update_experience(experience_id, form, images))


@router.delete("/{experience_id}")
def delete_experience(
    experience_id: int,
    db: Session = Depends(get_db),
    storage: FileStorageService = Depends(get_storage)
):
    ExperienceService(db, storage).delete_experience(experience_id)
    return {"message": "Experience deleted successfully!"}


@router.delete("/images/{image_id}")
def delete_image(
    image_id: int,
    db: Session = Depends(get_db),
    storage: FileStorageService = Depends(get_storage)
):
    ExperienceService(db, storage).delete_image(image_id)
    return {"message": "Image deleted successfully!"}
