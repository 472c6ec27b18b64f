import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from driveshare.core import sharing
from driveshare.crud.base import CRUDBase
from driveshare.models.share import ShareLink
from driveshare.schemas.share import ShareLinkCreate

logger = logging.getLogger(__name__)


class CRUDShareLink(CRUDBase[ShareLink, ShareLinkCreate, ShareLinkCreate]):
    def create_for_file(
        self,
        db: Session,
        *,
        file_id: int,
        creator_id: int,
        expires_in_days: int,
        one_time_use: bool,
        now: datetime,
    ) -> ShareLink:
        """
        Issue a new link. Raises ValidationError when the day count is
        outside the allowed range; nothing is written in that case.
        """
        expires_at = sharing.expiry_for(expires_in_days, now)
        db_obj = ShareLink(
            token=sharing.new_token(),
            file_id=file_id,
            created_by=creator_id,
            expires_at=expires_at,
            one_time_use=one_time_use,
            access_count=0,
            is_active=True,
            created_at=now,
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def get_by_token(self, db: Session, *, token: str) -> Optional[ShareLink]:
        return db.query(ShareLink).filter(ShareLink.token == token).first()

    def get_active_for_file(self, db: Session, *, file_id: int) -> List[ShareLink]:
        return (
            db.query(ShareLink)
            .filter(ShareLink.file_id == file_id, ShareLink.is_active == True)
            .order_by(ShareLink.created_at.desc(), ShareLink.id.desc())
            .all()
        )

    def record_access(self, db: Session, *, link: ShareLink, now: datetime) -> bool:
        """
        Count one access, but only if the link is still valid at `now`.

        The validity check and the increment run as a single conditional
        UPDATE, so two concurrent requests cannot both consume a one time
        link. Returns False for the request that lost.
        """
        result = db.execute(
            update(ShareLink)
            .where(
                ShareLink.id == link.id,
                ShareLink.is_active == True,
                ShareLink.expires_at >= now,
                or_(ShareLink.one_time_use == False, ShareLink.access_count == 0),
            )
            .values(access_count=ShareLink.access_count + 1, last_accessed_at=now)
            .execution_options(synchronize_session=False)
        )
        db.commit()
        db.refresh(link)
        won = result.rowcount == 1
        if not won:
            logger.info("Share link %s was consumed by a concurrent request", link.id)
        return won

    def revoke(self, db: Session, *, link: ShareLink) -> ShareLink:
        if link.is_active:
            link.is_active = False
            db.add(link)
            db.commit()
            db.refresh(link)
        return link

share_link = CRUDShareLink(ShareLink)
