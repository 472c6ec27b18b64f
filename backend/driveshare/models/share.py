from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from driveshare.db.base_class import Base
from driveshare.core import clock

class ShareLink(Base):
    __tablename__ = "share_link"

    id = Column(Integer, primary_key=True, index=True)
    token = Column(String(64), unique=True, index=True, nullable=False)
    file_id = Column(Integer, ForeignKey("file.id"), nullable=False, index=True)
    created_by = Column(Integer, ForeignKey("sys_user.id"), nullable=False)

    expires_at = Column(DateTime, nullable=False)
    one_time_use = Column(Boolean, default=False, nullable=False)

    access_count = Column(Integer, default=0, nullable=False)
    last_accessed_at = Column(DateTime, nullable=True)

    # Only revocation flips this, and never back
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=clock.utcnow, nullable=False)
