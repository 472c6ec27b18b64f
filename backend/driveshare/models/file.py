from sqlalchemy import Column, Integer, String, Boolean, BigInteger, ForeignKey, DateTime, Text, Index
from driveshare.db.base_class import Base
from driveshare.core import clock

class File(Base):
    __tablename__ = "file"

    id = Column(Integer, primary_key=True, index=True)
    # Set at upload, never reassigned
    user_id = Column(Integer, ForeignKey("sys_user.id"), nullable=False, index=True)

    original_name = Column(String(255), nullable=False)
    filename = Column(String(255), unique=True, nullable=False)  # name on disk
    path = Column(String(1024), nullable=False)
    size = Column(BigInteger, nullable=False)
    mimetype = Column(String(255), nullable=False)
    description = Column(Text, default="", nullable=False)

    is_public = Column(Boolean, default=False, nullable=False)
    download_count = Column(Integer, default=0, nullable=False)

    upload_date = Column(DateTime, default=clock.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_file_public_upload_date", "is_public", "upload_date"),
    )
