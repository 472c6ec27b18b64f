"""
Error taxonomy shared by the services and rendered by the exception
handlers in ``driveshare.main``.

Every error knows its HTTP status and the JSON body sent back to the
client. Body shape follows the rest of the API: ``{"success": false,
"message": ...}`` plus error specific fields.
"""
import logging
from contextlib import contextmanager
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

LOGIN_URL = "/user/login"
LINK_INVALID_MESSAGE = "Invalid or expired share link"


class DenialReason(str, Enum):
    PRIVATE = "private"
    NOT_OWNER = "not-owner"


class LinkInvalidReason(str, Enum):
    EXPIRED = "expired"
    EXHAUSTED = "exhausted"
    REVOKED = "revoked"
    NOT_FOUND = "not-found"


class DriveShareError(Exception):
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def extra(self) -> Dict[str, Any]:
        return {}

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"success": False, "message": self.message}
        payload.update(self.extra())
        return payload


class ValidationError(DriveShareError):
    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.errors: List[Dict[str, str]] = []
        if field:
            self.errors.append({"field": field, "message": message})

    def extra(self) -> Dict[str, Any]:
        return {"errors": self.errors}


class AuthenticationRequired(DriveShareError):
    status_code = 401

    def __init__(self, message: str = "Please login to access this resource") -> None:
        super().__init__(message)

    def extra(self) -> Dict[str, Any]:
        return {"redirectTo": LOGIN_URL}


class AuthorizationDenied(DriveShareError):
    status_code = 403

    def __init__(self, message: str, reason: DenialReason, needs_login: bool = False) -> None:
        super().__init__(message)
        self.reason = reason
        self.needs_login = needs_login

    def extra(self) -> Dict[str, Any]:
        if self.reason is DenialReason.PRIVATE:
            return {"needsLogin": self.needs_login}
        return {}


class LinkInvalid(DriveShareError):
    """
    The outward message is the same for every reason so callers cannot
    probe which terminal state a link is in. ``reason`` stays available
    to logs and tests.
    """
    status_code = 410

    def __init__(self, reason: LinkInvalidReason) -> None:
        super().__init__(LINK_INVALID_MESSAGE)
        self.reason = reason


class NotFound(DriveShareError):
    status_code = 404


class StoreUnavailable(DriveShareError):
    status_code = 503

    def __init__(self, message: str = "Storage is temporarily unavailable") -> None:
        super().__init__(message)


@contextmanager
def store_errors(action: str) -> Iterator[None]:
    """Convert database failures raised inside the block to StoreUnavailable."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.exception("Store failure while %s", action)
        raise StoreUnavailable() from exc
