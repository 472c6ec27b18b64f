import logging
from datetime import timedelta
from typing import Any

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from driveshare import crud, schemas
from driveshare.api import deps
from driveshare.core import security
from driveshare.core.config import settings
from driveshare.core.errors import AuthenticationRequired, ValidationError, store_errors

logger = logging.getLogger(__name__)

router = APIRouter()


def _issue_token(response: Response, user_id: int) -> schemas.Token:
    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    token = security.create_access_token(user_id, expires_delta=access_token_expires)
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    return schemas.Token(access_token=token, token_type="bearer")


@router.post("/register", response_model=schemas.User)
def register(
    *,
    db: Session = Depends(deps.get_db),
    user_in: schemas.UserCreate,
) -> Any:
    """
    Create new user.
    """
    with store_errors("registering a user"):
        if crud.user.get_by_email(db, email=user_in.email):
            raise ValidationError("Email already registered", field="email")
        user = crud.user.create(db, obj_in=user_in)
    logger.info("Registered user %s", user.id)
    return user


@router.post("/login", response_model=schemas.Token)
def login(
    *,
    response: Response,
    db: Session = Depends(deps.get_db),
    credentials: schemas.UserLogin,
) -> Any:
    """
    Exchange email and password for an access token, also set as cookie.
    """
    with store_errors("authenticating"):
        user = crud.user.authenticate(db, email=credentials.email, password=credentials.password)
    if not user:
        raise AuthenticationRequired("Incorrect email or password")
    return _issue_token(response, user.id)


@router.post("/logout", response_model=schemas.Message)
def logout(response: Response) -> Any:
    response.delete_cookie(settings.AUTH_COOKIE_NAME)
    return schemas.Message(message="Logged out")
