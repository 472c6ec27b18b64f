from typing import Optional
from sqlalchemy.orm import Session

from driveshare.core.security import get_password_hash, verify_password
from driveshare.crud.base import CRUDBase
from driveshare.models.user import User
from driveshare.schemas.user import UserCreate


class CRUDUser(CRUDBase[User, UserCreate, UserCreate]):
    def get_by_email(self, db: Session, *, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email.lower()).first()

    def create(self, db: Session, *, obj_in: UserCreate) -> User:
        db_obj = User(
            name=obj_in.name.strip(),
            email=obj_in.email.lower(),
            password_hash=get_password_hash(obj_in.password),
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def authenticate(
        self, db: Session, *, email: str, password: str
    ) -> Optional[User]:
        user = self.get_by_email(db, email=email)
        if not user:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

user = CRUDUser(User)
