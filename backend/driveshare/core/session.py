"""
Turns a presented credential into a user, or into nobody.

``resolve`` behaves the same whether the route needs a login or not; the
API layer decides what an anonymous result means (see
``driveshare.api.deps.resolve_user``).
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sqlalchemy.orm import Session

from driveshare import crud
from driveshare.core import security
from driveshare.models.user import User

logger = logging.getLogger(__name__)


class SessionFailure(str, Enum):
    MISSING = "missing"
    INVALID = "invalid"
    UNKNOWN_USER = "unknown-user"


FAILURE_MESSAGES = {
    SessionFailure.MISSING: "Please login to access this resource",
    SessionFailure.INVALID: "Invalid token. Please login again.",
    SessionFailure.UNKNOWN_USER: "User not found. Please login again.",
}


@dataclass(frozen=True)
class Resolution:
    user: Optional[User] = None
    failure: Optional[SessionFailure] = None

    @property
    def clear_credential(self) -> bool:
        # A credential was sent but is useless; the client should drop it
        return self.failure in (SessionFailure.INVALID, SessionFailure.UNKNOWN_USER)

    @property
    def message(self) -> str:
        return FAILURE_MESSAGES[self.failure or SessionFailure.MISSING]


def resolve(db: Session, token: Optional[str]) -> Resolution:
    if not token:
        return Resolution(failure=SessionFailure.MISSING)

    subject = security.decode_access_token(token)
    if subject is None:
        logger.info("Rejected credential: bad signature, expired or malformed")
        return Resolution(failure=SessionFailure.INVALID)

    try:
        user_id = int(subject)
    except ValueError:
        logger.info("Rejected credential: non numeric subject")
        return Resolution(failure=SessionFailure.INVALID)

    user = crud.user.get(db, id=user_id)
    if user is None:
        logger.info("Rejected credential: user %s no longer exists", user_id)
        return Resolution(failure=SessionFailure.UNKNOWN_USER)
    return Resolution(user=user)
