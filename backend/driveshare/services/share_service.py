"""
Share-Link Lifecycle Manager.

Owner checks happen here, through ``core.authz``, before anything is
handed to the share link store.
"""
import logging
from datetime import datetime
from typing import Any, List, Optional, Tuple

from sqlalchemy.orm import Session

from driveshare import crud, models
from driveshare.core import authz, clock, sharing
from driveshare.core.authz import Operation
from driveshare.core.errors import LinkInvalid, LinkInvalidReason, NotFound, store_errors
from driveshare.services import file_service
from driveshare.services.file_service import DownloadTicket
from driveshare.utils import storage

logger = logging.getLogger(__name__)


def _owner_check(operation: Operation, identity: Optional[models.User], **records) -> None:
    verdict = authz.authorize(operation, identity=identity, **records)
    if not verdict.allowed:
        logger.warning(
            "%s denied for user %s: %s",
            operation.value, identity.id if identity else None, verdict.outcome.value,
        )
    authz.ensure_allowed(operation, verdict)


def create_share_link(
    db: Session,
    *,
    file_id: int,
    identity: Optional[models.User],
    expires_in: Any,
    one_time_use: bool = False,
    now: Optional[datetime] = None,
) -> models.ShareLink:
    if now is None:
        now = clock.utcnow()
    # Day count is checked before any lookup; the store checks it again
    sharing.expiry_for(expires_in, now)
    file = file_service.get_file_or_404(db, file_id)
    _owner_check(Operation.CREATE_SHARE_LINK, identity, file=file)
    with store_errors("creating a share link"):
        link = crud.share_link.create_for_file(
            db,
            file_id=file.id,
            creator_id=identity.id,
            expires_in_days=expires_in,
            one_time_use=one_time_use,
            now=now,
        )
    logger.info(
        "User %s created share link %s for file %s (expires %s, one time: %s)",
        identity.id, link.id, file.id, link.expires_at.isoformat(), link.one_time_use,
    )
    return link


def list_share_links(
    db: Session, *, file_id: int, identity: Optional[models.User]
) -> Tuple[models.File, List[models.ShareLink]]:
    file = file_service.get_file_or_404(db, file_id)
    _owner_check(Operation.LIST_SHARE_LINKS, identity, file=file)
    with store_errors("listing share links"):
        links = crud.share_link.get_active_for_file(db, file_id=file.id)
    return file, links


def revoke_share_link(db: Session, *, link_id: int, identity: Optional[models.User]) -> models.ShareLink:
    with store_errors("loading a share link"):
        link = crud.share_link.get(db, id=link_id)
    if not link:
        raise NotFound("Share link not found")
    _owner_check(Operation.REVOKE_SHARE_LINK, identity, link=link)
    with store_errors("revoking a share link"):
        link = crud.share_link.revoke(db, link=link)
    logger.info("User %s revoked share link %s", identity.id, link.id)
    return link


def _resolve_token(db: Session, token: str, now: datetime) -> Tuple[models.ShareLink, models.File]:
    with store_errors("loading a share link"):
        link = crud.share_link.get_by_token(db, token=token)
    if link is None:
        logger.info("Unknown share token presented")
        raise LinkInvalid(LinkInvalidReason.NOT_FOUND)
    # Token-only routes: a link in a terminal state ends the request,
    # public file or not
    reason = sharing.invalid_reason(link, now)
    if reason is not None:
        logger.info("Share link %s refused: %s", link.id, reason.value)
        raise LinkInvalid(reason)
    with store_errors("loading a shared file"):
        file = crud.file.get(db, id=link.file_id)
    if file is None:
        logger.warning("Share link %s points at missing file %s", link.id, link.file_id)
        raise NotFound("The file associated with this link no longer exists")
    return link, file


def open_shared_file(
    db: Session, *, token: str, now: Optional[datetime] = None
) -> Tuple[models.ShareLink, models.File, Optional[models.User]]:
    """
    Look at a shared file without consuming the link. Returns the link,
    the file and its owner.
    """
    if now is None:
        now = clock.utcnow()
    link, file = _resolve_token(db, token, now)
    verdict = authz.authorize(Operation.DOWNLOAD, file=file, link=link, share_token=token, now=now)
    if not verdict.allowed:
        logger.info("Share link %s refused: %s", link.id, verdict.link_reason.value if verdict.link_reason else verdict.outcome.value)
    authz.ensure_allowed(Operation.DOWNLOAD, verdict)
    if not storage.file_exists(file.path):
        raise NotFound("File not found on server")
    with store_errors("loading the file owner"):
        owner = crud.user.get(db, id=file.user_id)
    return link, file, owner


def prepare_shared_download(db: Session, *, token: str, now: Optional[datetime] = None) -> DownloadTicket:
    if now is None:
        now = clock.utcnow()
    link, file = _resolve_token(db, token, now)
    return file_service.prepare_download(db, file=file, share_token=token, link=link, now=now)

