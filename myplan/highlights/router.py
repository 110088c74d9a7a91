from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from myplan.auth.dependencies import get_current_admin, get_current_visitor, require_admin
from myplan.database import get_db
from myplan.highlights.schemas import (
    AdminAuthor, HighlightBulkDelete, HighlightCreate, HighlightResponse, HighlightUpdate,
    VisitorAuthor
)
from myplan.highlights.service import HighlightService
from myplan.models import Admin, Visitor
from myplan.storage import FileStorageService, get_storage

router = APIRouter()
admin_router = APIRouter(dependencies=[Depends(require_admin)])


def highlight_form(
    title: str = Form(..., min_length=1, max_length=100),
    content: Optional[str] = Form(None),
    description: Optional[str] = Form(None, max_length=1000),
) -> HighlightCreate:
    return HighlightCreate(title=title, content=content, description=description)


# Visitor Endpoints
@router.post("", response_model=HighlightResponse, status_code=status.HTTP_201_CREATED)
def create_highlight(
    request: HighlightCreate = Depends(highlight_form),
    image: Optional[UploadFile] = File(None),
    visitor: Visitor = Depends(get_current_visitor),
    db: Session = Depends(get_db),
    storage: FileStorageService = Depends(get_storage)
):
    service = HighlightService(db, storage)
    highlight = service.create_highlight(VisitorAuthor(visitor_id=visitor.visitor_id), request, image)
    return service.to_response(highlight)


@router.put("/{highlight_id}", response_model=HighlightResponse)
def update_highlight(
    highlight_id: int,
    request: HighlightUpdate,
    visitor: Visitor = Depends(get_current_visitor),
    db: Session = Depends(get_db)
):
    service = HighlightService(db)
    return service.to_response(service.update_own_highlight(visitor.visitor_id, highlight_id, request))


@router.delete("/{highlight_id}")
def delete_highlight(
    highlight_id: int,
    visitor: Visitor = Depends(get_current_visitor),
    db: Session = Depends(get_db),
    storage: FileStorageService = Depends(get_storage)
):
    HighlightService(db, storage).delete_own_highlight(visitor.visitor_id, highlight_id)
    return {"message": "Highlight deleted successfully!"}


# Admin Endpoints
@admin_router.get("", response_model=List[HighlightResponse])
def list_highlights(db: Session = Depends(get_db)):
    return HighlightService(db).list_highlights()


@admin_router.post("", response_model=HighlightResponse, status_code=status.HTTP_201_CREATED)
def admin_create_highlight(
    request: HighlightCreate = Depends(highlight_form),
    image: Optional[UploadFile] = File(None),
    admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
    storage: FileStorageService = Depends(get_storage)
):
    service = HighlightService(db, storage)
    highlight = service.create_highlight(AdminAuthor(admin_id=admin.admin_id), request, image)
    return service.to_response(highlight)


@admin_router.post("/bulk-delete")
def bulk_delete_highlights(
    request: HighlightBulkDelete,
    db: Session = Depends(get_db),
    storage: FileStorageService = Depends(get_storage)
):
    deleted = HighlightService(db, storage).bulk_delete(request.ids)
    return {"deleted": deleted, "message": f"{deleted} highlight(s) deleted successfully!"}


@admin_router.get("/{highlight_id}", response_model=HighlightResponse)
def get_highlight(highlight_id: int, db: Session = Depends(get_db)):
    service = HighlightService(db)
    return service.to_response(service.get_highlight(highlight_id))


@admin_router.delete("/{highlight_id}")
def admin_delete_highlight(
    highlight_id: int,
    db: Session = Depends(get_db),
    storage: FileStorageService = Depends(get_storage)
):
    HighlightService(db, storage).delete_highlight(highlight_id)
    return {"message": "Highlight deleted successfully!"}
