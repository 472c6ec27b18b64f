"""
File Resource Service.

Fetches records, asks ``core.authz`` for a verdict and performs exactly
one mutation when the verdict allows it. Denials never write anything.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from fastapi import UploadFile
from sqlalchemy.orm import Session

from driveshare import crud, models, schemas
from driveshare.core import authz, clock, sharing
from driveshare.core.authz import AccessPath, Operation
from driveshare.core.config import settings
from driveshare.core.errors import LinkInvalid, LinkInvalidReason, NotFound, ValidationError, store_errors
from driveshare.utils import storage

logger = logging.getLogger(__name__)

DEFAULT_MIMETYPE = "application/octet-stream"


@dataclass(frozen=True)
class DownloadTicket:
    """Everything needed to stream an authorized download."""
    path: str
    filename: str
    mimetype: str
    via: AccessPath


def get_file_or_404(db: Session, file_id: int) -> models.File:
    with store_errors("loading a file"):
        file = crud.file.get(db, id=file_id)
    if not file:
        raise NotFound("File not found")
    return file


def with_owners(db: Session, files: List[models.File]) -> List[schemas.File]:
    """Attach `uploadedBy` by fetching the owners explicitly, one query."""
    with store_errors("loading file owners"):
        owners = crud.user.get_many(db, ids=[f.user_id for f in files])
    result = []
    for f in files:
        item = schemas.File.model_validate(f)
        owner = owners.get(f.user_id)
        if owner is not None:
            item.uploaded_by = schemas.Owner.model_validate(owner)
        result.append(item)
    return result


def upload_file(
    db: Session,
    *,
    identity: Optional[models.User],
    upload: Optional[UploadFile],
    is_public: bool = False,
    description: str = "",
) -> models.File:
    authz.ensure_allowed(Operation.UPLOAD, authz.authorize(Operation.UPLOAD, identity=identity))
    if upload is None or not upload.filename or not upload.filename.strip():
        raise ValidationError("No file uploaded", field="file")

    blob = storage.save_upload(upload)
    obj_in = schemas.FileCreate(
        original_name=upload.filename.strip(),
        filename=blob.filename,
        path=blob.path,
        size=blob.size,
        mimetype=upload.content_type or DEFAULT_MIMETYPE,
        is_public=is_public,
        description=(description or "").strip(),
    )
    try:
        with store_errors("saving file metadata"):
            file = crud.file.create_with_owner(db, obj_in=obj_in, user_id=identity.id)
    except Exception:
        # Clean up uploaded file if database save fails
        storage.remove_file(blob.path)
        raise
    logger.info("User %s uploaded file %s (%s bytes, public=%s)", identity.id, file.id, file.size, file.is_public)
    return file


def list_owned_files(db: Session, *, identity: models.User) -> List[schemas.File]:
    with store_errors("listing owned files"):
        files = crud.file.get_by_owner(db, user_id=identity.id)
    return with_owners(db, files)


def list_public_files(db: Session) -> List[schemas.File]:
    with store_errors("listing public files"):
        files = crud.file.get_public(db, limit=settings.PUBLIC_FILES_LIMIT)
    return with_owners(db, files)


def prepare_download(
    db: Session,
    *,
    file: models.File,
    identity: Optional[models.User] = None,
    share_token: Optional[str] = None,
    link: Optional[models.ShareLink] = None,
    now: Optional[datetime] = None,
) -> DownloadTicket:
    """
    Authorize a download of `file` and apply its side effects.

    The share link is consumed only when it is the authorizing path, and
    the download counter moves only once the bytes are known to exist.
    """
    if now is None:
        now = clock.utcnow()
    verdict = authz.authorize(
        Operation.DOWNLOAD, identity=identity, file=file, link=link, share_token=share_token, now=now
    )
    if not verdict.allowed:
        logger.info(
            "Download of file %s denied: %s %s",
            file.id, verdict.outcome.value, verdict.link_reason.value if verdict.link_reason else "",
        )
    via = authz.ensure_allowed(Operation.DOWNLOAD, verdict)

    if not storage.file_exists(file.path):
        logger.error("File %s is missing on disk at %s", file.id, file.path)
        raise NotFound("File not found on disk")

    with store_errors("recording a download"):
        if via is AccessPath.SHARE_LINK:
            if not crud.share_link.record_access(db, link=link, now=now):
                reason = sharing.invalid_reason(link, now) or LinkInvalidReason.EXHAUSTED
                raise LinkInvalid(reason)
        crud.file.increment_download_count(db, file_id=file.id)

    logger.info("File %s downloaded via %s", file.id, via.value)
    return DownloadTicket(
        path=file.path,
        filename=file.original_name,
        mimetype=file.mimetype or DEFAULT_MIMETYPE,
        via=via,
    )


def download_file(
    db: Session,
    *,
    file_id: int,
    identity: Optional[models.User] = None,
    share_token: Optional[str] = None,
    now: Optional[datetime] = None,
) -> DownloadTicket:
    file = get_file_or_404(db, file_id)
    link = None
    if share_token is not None:
        with store_errors("loading a share link"):
            link = crud.share_link.get_by_token(db, token=share_token)
    return prepare_download(db, file=file, identity=identity, share_token=share_token, link=link, now=now)


def toggle_visibility(db: Session, *, file_id: int, identity: Optional[models.User]) -> models.File:
    file = get_file_or_404(db, file_id)
    verdict = authz.authorize(Operation.TOGGLE_VISIBILITY, identity=identity, file=file)
    authz.ensure_allowed(Operation.TOGGLE_VISIBILITY, verdict)
    with store_errors("changing file visibility"):
        file = crud.file.set_visibility(db, db_obj=file, is_public=not file.is_public)
    logger.info("File %s is now %s", file.id, "public" if file.is_public else "private")
    return file
