from sqlalchemy import Column, Integer, String, DateTime
from driveshare.db.base_class import Base
from driveshare.core import clock

class User(Base):
    __tablename__ = "sys_user"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=clock.utcnow)
