import logging
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from sqlalchemy.orm import Session

from .. import schemas
from ..config.settings import get_settings
from ..exceptions import TrackerError
from ..models.db.database import get_db
from ..services import resume_service
from ..services.blob_storage import BlobStorage, get_blob_storage
from ..utils.api_helpers import check_resource_exists, handle_service_error
from .auth import get_current_active_user

logger = logging.getLogger(__name__)
router = APIRouter()


def _content_disposition(file_name: str) -> str:
    fallback = file_name.encode("ascii", "replace").decode("ascii").replace('"', "_")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(file_name)}"


@router.post("/", response_model=schemas.Resume, status_code=status.HTTP_201_CREATED)
async def upload_resume(
    file: UploadFile = File(...),
    name: str = Form(...),
    description: Optional[str] = Form(None),
    version: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
    current_user: schemas.User = Depends(get_current_active_user)
):
    """
    Upload a resume file and record its metadata.
    """
    # one byte past the limit is enough for validation to reject the file
    content = await file.read(get_settings().max_file_size + 1)
    try:
        return resume_service.upload_resume(
            db,
            storage,
            user_id=current_user.id,
            file_name=file.filename,
            content=content,
            content_type=file.content_type,
            name=name,
            description=description,
            version=version,
        )
    except TrackerError as e:
        raise handle_service_error(e, "upload resume")


@router.get("/", response_model=List[schemas.Resume])
def read_resumes(
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    try:
        return resume_service.get_user_resumes(db, user_id=current_user.id)
    except TrackerError as e:
        raise handle_service_error(e, "load resumes")


@router.get("/default", response_model=schemas.Resume)
def read_default_resume(
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    try:
        db_resume = resume_service.get_default_resume(db, user_id=current_user.id)
    except TrackerError as e:
        raise handle_service_error(e, "load resumes")
    check_resource_exists(db_resume, "Default resume")
    return db_resume


@router.get("/{resume_id}", response_model=schemas.Resume)
def read_resume(
    resume_id: int,
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    try:
        db_resume = resume_service.get_resume_by_id(db, resume_id=resume_id, user_id=current_user.id)
    except TrackerError as e:
        raise handle_service_error(e, "load resume")
    check_resource_exists(db_resume, "Resume")
    return db_resume


@router.get("/{resume_id}/file")
def download_resume(
    resume_id: int,
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
    current_user: schemas.User = Depends(get_current_active_user)
):
    """
    Return the stored resume file as an attachment.
    """
    try:
        db_resume, data = resume_service.download_resume(
            db, storage, user_id=current_user.id, resume_id=resume_id
        )
    except TrackerError as e:
        raise handle_service_error(e, "download resume")
    return Response(
        content=data,
        media_type=db_resume.file_type,
        headers={"Content-Disposition": _content_disposition(db_resume.file_name)},
    )


@router.put("/{resume_id}", response_model=schemas.Resume)
def update_resume(
    resume_id: int,
    updates: schemas.ResumeUpdate,
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    try:
        return resume_service.update_resume(db, resume_id=resume_id, user_id=current_user.id, updates=updates)
    except TrackerError as e:
        raise handle_service_error(e, "update resume")


@router.post("/{resume_id}/default", response_model=schemas.Resume)
def set_default_resume(
    resume_id: int,
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    try:
        return resume_service.set_default_resume(db, user_id=current_user.id, resume_id=resume_id)
    except TrackerError as e:
        raise handle_service_error(e, "set default resume")


@router.delete("/{resume_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_resume(
    resume_id: int,
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
    current_user: schemas.User = Depends(get_current_active_user)
):
    try:
        resume_service.delete_resume(db, storage, user_id=current_user.id, resume_id=resume_id)
    except TrackerError as e:
        raise handle_service_error(e, "delete resume")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
