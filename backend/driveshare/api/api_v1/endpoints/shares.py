from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from driveshare import models, schemas
from driveshare.api import deps
from driveshare.core import clock, sharing
from driveshare.services import share_service
from driveshare.utils.urls import share_url

router = APIRouter()


def _link_view(request: Request, link: models.ShareLink, now) -> schemas.ShareLink:
    return schemas.ShareLink(
        id=link.id,
        url=share_url(request, link.token),
        expires_at=link.expires_at,
        one_time_use=link.one_time_use,
        access_count=link.access_count,
        last_accessed_at=link.last_accessed_at,
        has_expired=sharing.has_expired(link, now),
        is_valid=sharing.is_valid(link, now),
    )


@router.post("/create-share-link/{file_id}", response_model=schemas.ShareLinkCreated)
def create_share_link(
    *,
    file_id: int,
    request: Request,
    share_in: schemas.ShareLinkCreate,
    db: Session = Depends(deps.get_db),
    current_user: models.User = Depends(deps.get_current_user),
) -> Any:
    """
    Create a share link that expires after `expiresIn` days (1 to 30).
    """
    now = clock.utcnow()
    link = share_service.create_share_link(
        db,
        file_id=file_id,
        identity=current_user,
        expires_in=share_in.expires_in,
        one_time_use=share_in.one_time_use,
        now=now,
    )
    info = f"Share link will expire on {link.expires_at:%Y-%m-%d %H:%M} UTC."
    if link.one_time_use:
        info += " This link can only be used once."
    return schemas.ShareLinkCreated(
        message="Share link created successfully!",
        additional_info=info,
        share_link=_link_view(request, link, now),
    )


@router.get("/share-links/{file_id}", response_model=schemas.ShareLinkList)
def read_share_links(
    file_id: int,
    request: Request,
    db: Session = Depends(deps.get_db),
    current_user: models.User = Depends(deps.get_current_user),
) -> Any:
    """
    Active (not revoked) share links of a file, newest first.
    """
    now = clock.utcnow()
    file, links = share_service.list_share_links(db, file_id=file_id, identity=current_user)
    return schemas.ShareLinkList(
        file=schemas.SharedFileRef(id=file.id, name=file.original_name),
        share_links=[_link_view(request, link, now) for link in links],
    )


@router.post("/revoke-share-link/{link_id}", response_model=schemas.Message)
def revoke_share_link(
    link_id: int,
    db: Session = Depends(deps.get_db),
    current_user: models.User = Depends(deps.get_current_user),
) -> Any:
    share_service.revoke_share_link(db, link_id=link_id, identity=current_user)
    return schemas.Message(message="Share link has been revoked successfully")


@router.get("/s/{token}", response_model=schemas.SharedFileInfo)
def read_shared_file(token: str, db: Session = Depends(deps.get_db)) -> Any:
    """
    Public info about a shared file. Does not use up the link.
    """
    link, file, owner = share_service.open_shared_file(db, token=token)
    shared = schemas.SharedFile.model_validate(file)
    if owner is not None:
        shared.uploaded_by = schemas.Owner.model_validate(owner)
    return schemas.SharedFileInfo(file=shared, link=schemas.SharedLinkInfo.model_validate(link))


@router.get("/s/{token}/download")
def download_shared_file(token: str, db: Session = Depends(deps.get_db)) -> Any:
    """
    Download through a share link. Counts as one access of the link.
    """
    ticket = share_service.prepare_shared_download(db, token=token)
    return FileResponse(ticket.path, filename=ticket.filename, media_type=ticket.mimetype)
