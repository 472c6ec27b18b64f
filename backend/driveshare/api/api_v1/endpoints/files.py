from typing import Any, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from driveshare import models, schemas
from driveshare.api import deps
from driveshare.services import file_service

router = APIRouter()

TRUTHY_FORM_VALUES = {"on", "true", "1", "yes"}


def _form_flag(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() in TRUTHY_FORM_VALUES


@router.post("/upload", response_model=schemas.UploadResponse)
def upload_file(
    *,
    db: Session = Depends(deps.get_db),
    current_user: models.User = Depends(deps.get_current_user),
    file: Optional[UploadFile] = File(None),
    is_public: Optional[str] = Form(None, alias="isPublic"),
    description: str = Form(""),
) -> Any:
    """
    Upload a file. Private unless `isPublic` is `on`/`true`.
    """
    record = file_service.upload_file(
        db,
        identity=current_user,
        upload=file,
        is_public=_form_flag(is_public),
        description=description,
    )
    return schemas.UploadResponse(file=schemas.UploadedFile.model_validate(record))


@router.get("/files", response_model=schemas.FileList)
def read_files(
    db: Session = Depends(deps.get_db),
    current_user: models.User = Depends(deps.get_current_user),
) -> Any:
    """
    Files owned by the current user, newest first.
    """
    return schemas.FileList(files=file_service.list_owned_files(db, identity=current_user))


@router.get("/public-files-api", response_model=schemas.FileList)
def read_public_files(db: Session = Depends(deps.get_db)) -> Any:
    """
    Newest public files, capped by PUBLIC_FILES_LIMIT.
    """
    return schemas.FileList(files=file_service.list_public_files(db))


@router.get("/download/{file_id}")
def download_file(
    file_id: int,
    token: Optional[str] = None,
    db: Session = Depends(deps.get_db),
    current_user: Optional[models.User] = Depends(deps.get_optional_user),
) -> Any:
    """
    Download a file. Public files need nothing, private files need the
    owner's login or a valid share token passed as `?token=`.
    """
    ticket = file_service.download_file(db, file_id=file_id, identity=current_user, share_token=token)
    return FileResponse(ticket.path, filename=ticket.filename, media_type=ticket.mimetype)


@router.post("/toggle-privacy/{file_id}", response_model=schemas.VisibilityResponse)
def toggle_privacy(
    file_id: int,
    db: Session = Depends(deps.get_db),
    current_user: models.User = Depends(deps.get_current_user),
) -> Any:
    file = file_service.toggle_visibility(db, file_id=file_id, identity=current_user)
    return schemas.VisibilityResponse(
        message=f"File is now {'public' if file.is_public else 'private'}",
        is_public=file.is_public,
    )
