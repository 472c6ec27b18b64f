from typing import List
from sqlalchemy.orm import Session
from sqlalchemy import update

from driveshare.crud.base import CRUDBase
from driveshare.models.file import File
from driveshare.schemas.file import FileCreate


class CRUDFile(CRUDBase[File, FileCreate, FileCreate]):
    def create_with_owner(self, db: Session, *, obj_in: FileCreate, user_id: int) -> File:
        db_obj = File(**obj_in.model_dump(), user_id=user_id)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def get_by_owner(self, db: Session, *, user_id: int) -> List[File]:
        return (
            db.query(File)
            .filter(File.user_id == user_id)
            .order_by(File.upload_date.desc(), File.id.desc())
            .all()
        )

    def get_public(self, db: Session, *, limit: int = 50) -> List[File]:
        return (
            db.query(File)
            .filter(File.is_public == True)
            .order_by(File.upload_date.desc(), File.id.desc())
            .limit(limit)
            .all()
        )

    def set_visibility(self, db: Session, *, db_obj: File, is_public: bool) -> File:
        return self.update(db, db_obj=db_obj, obj_in={"is_public": is_public})

    def increment_download_count(self, db: Session, *, file_id: int) -> None:
        # Done in SQL so concurrent downloads do not overwrite each other
        db.execute(
            update(File)
            .where(File.id == file_id)
            .values(download_count=File.download_count + 1)
            .execution_options(synchronize_session=False)
        )
        db.commit()

file = CRUDFile(File)
