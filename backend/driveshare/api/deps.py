from typing import Callable, Generator, Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from driveshare import models
from driveshare.core import session
from driveshare.core.config import settings
from driveshare.core.errors import AuthenticationRequired
from driveshare.db.session import SessionLocal


def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_presented_token(request: Request) -> Optional[str]:
    """Bearer header first, then the auth cookie set by /user/login."""
    authorization = request.headers.get("authorization")
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
    return request.cookies.get(settings.AUTH_COOKIE_NAME) or None


def resolve_user(required: bool) -> Callable[..., Optional[models.User]]:
    """
    Build the dependency that resolves the requester.

    With ``required`` the request stops with AuthenticationRequired when
    nobody resolves; otherwise the route runs with ``None``.
    """
    def dependency(
        request: Request, db: Session = Depends(get_db)
    ) -> Optional[models.User]:
        resolution = session.resolve(db, get_presented_token(request))
        if resolution.clear_credential:
            # Picked up by the middleware in main, which deletes the cookie
            request.state.clear_credential = True
        if required and resolution.user is None:
            raise AuthenticationRequired(resolution.message)
        return resolution.user

    return dependency


get_optional_user = resolve_user(required=False)
get_current_user = resolve_user(required=True)
