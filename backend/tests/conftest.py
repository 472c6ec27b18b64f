import os
import tempfile
import uuid

_TMP_DIR = tempfile.mkdtemp(prefix="driveshare-tests-")
os.environ["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["SECRET_KEY"] = "test-secret-key"

import pytest
from fastapi.testclient import TestClient

from driveshare import crud, schemas
from driveshare.core import security
from driveshare.core.config import settings
from driveshare.db.base import Base
from driveshare.db.session import SessionLocal, engine
from driveshare.main import app

PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def create_user(db, name):
    user_in = schemas.UserCreate(name=name, email=f"{name.lower()}@driveshare.io", password=PASSWORD)
    return crud.user.create(db, obj_in=user_in)


def auth_headers(user):
    return {"Authorization": f"Bearer {security.create_access_token(user.id)}"}


@pytest.fixture
def alice(db):
    return create_user(db, "Alice")


@pytest.fixture
def bob(db):
    return create_user(db, "Bob")


@pytest.fixture
def make_file(db):
    """Store bytes in the upload dir and create the matching record."""
    def factory(owner, content=b"hello world", name="notes.txt", is_public=False, on_disk=True):
        filename = f"{uuid.uuid4().hex}.txt"
        path = os.path.join(settings.UPLOAD_DIR, filename)
        if on_disk:
            os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
            with open(path, "wb") as fh:
                fh.write(content)
        obj_in = schemas.FileCreate(
            original_name=name,
            filename=filename,
            path=path,
            size=len(content),
            mimetype="text/plain",
            is_public=is_public,
        )
        return crud.file.create_with_owner(db, obj_in=obj_in, user_id=owner.id)
    return factory
