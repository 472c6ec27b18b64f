import logging

from driveshare import crud, schemas
from driveshare.core.config import settings
from driveshare.db.base import Base
from driveshare.db.session import SessionLocal, engine

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

def init() -> None:
    Base.metadata.create_all(bind=engine)

    if not settings.FIRST_USER_EMAIL or not settings.FIRST_USER_PASSWORD:
        logger.info("FIRST_USER_EMAIL/FIRST_USER_PASSWORD not set, skipping seed account")
        return

    db = SessionLocal()
    try:
        user = crud.user.get_by_email(db, email=settings.FIRST_USER_EMAIL)
        if not user:
            user_in = schemas.UserCreate(
                name=settings.FIRST_USER_NAME,
                email=settings.FIRST_USER_EMAIL,
                password=settings.FIRST_USER_PASSWORD,
            )
            crud.user.create(db, obj_in=user_in)
            logger.info("Seed user created")
        else:
            logger.info("Seed user already exists")
    finally:
        db.close()

if __name__ == "__main__":
    logger.info("Creating initial data")
    init()
    logger.info("Initial data created")
