"""
Authorization decisions for every request that touches a file or a
share link.

``authorize`` is a pure function. It receives the records the caller
already fetched (file, share link, user) and returns a ``Verdict``; it
never talks to the database and never mutates anything. Side effects
such as counting a download or consuming a link are the caller's job,
and only after an allowing verdict.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from driveshare.core import clock, sharing
from driveshare.core.errors import (
    AuthenticationRequired,
    AuthorizationDenied,
    DenialReason,
    LinkInvalid,
    LinkInvalidReason,
)


class Operation(str, Enum):
    UPLOAD = "upload"
    DOWNLOAD = "download"
    TOGGLE_VISIBILITY = "toggle-visibility"
    CREATE_SHARE_LINK = "create-share-link"
    LIST_SHARE_LINKS = "list-share-links"
    REVOKE_SHARE_LINK = "revoke-share-link"


class Outcome(str, Enum):
    ALLOW = "allow"
    DENY_AUTHENTICATION = "deny-authentication"
    DENY_PRIVATE = "deny-private"
    DENY_NOT_OWNER = "deny-not-owner"
    DENY_LINK_INVALID = "deny-link-invalid"


class AccessPath(str, Enum):
    SHARE_LINK = "share-link"
    PUBLIC = "public"
    OWNER = "owner"


@dataclass(frozen=True)
class Verdict:
    outcome: Outcome
    via: Optional[AccessPath] = None
    link_reason: Optional[LinkInvalidReason] = None
    needs_login: bool = False

    @property
    def allowed(self) -> bool:
        return self.outcome is Outcome.ALLOW


_OWNER_OPERATIONS = frozenset({
    Operation.TOGGLE_VISIBILITY,
    Operation.CREATE_SHARE_LINK,
    Operation.LIST_SHARE_LINKS,
})

NOT_OWNER_MESSAGES = {
    Operation.TOGGLE_VISIBILITY: "Access denied. You can only modify your own files.",
    Operation.CREATE_SHARE_LINK: "You can only share your own files",
    Operation.LIST_SHARE_LINKS: "You can only view share links for your own files",
    Operation.REVOKE_SHARE_LINK: "You can only revoke your own share links",
}


def allow(via: AccessPath) -> Verdict:
    return Verdict(Outcome.ALLOW, via=via)


def _is_owner(identity: Any, owner_id: Any) -> bool:
    return identity is not None and identity.id == owner_id


def _authorize_download(file: Any, identity: Any, share_token: Optional[str], link: Any, now: datetime) -> Verdict:
    link_reason = None
    if share_token is not None:
        if link is None or link.token != share_token or link.file_id != file.id:
            link_reason = LinkInvalidReason.NOT_FOUND
        else:
            link_reason = sharing.invalid_reason(link, now)
            if link_reason is None:
                return allow(AccessPath.SHARE_LINK)

    if file.is_public:
        return allow(AccessPath.PUBLIC)
    if _is_owner(identity, file.user_id):
        return allow(AccessPath.OWNER)
    if link_reason is not None:
        return Verdict(Outcome.DENY_LINK_INVALID, link_reason=link_reason)
    return Verdict(Outcome.DENY_PRIVATE, needs_login=identity is None)


def authorize(
    operation: Operation,
    *,
    identity: Any = None,
    file: Any = None,
    link: Any = None,
    share_token: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Verdict:
    """
    Decide whether ``identity`` may perform ``operation``.

    For downloads ``share_token`` is the token the requester presented
    and ``link`` the record found for it (None if unknown). For
    revocation ``link`` is the link being revoked. Share tokens never
    authorize anything but downloads.
    """
    if now is None:
        now = clock.utcnow()

    if operation is Operation.DOWNLOAD:
        return _authorize_download(file, identity, share_token, link, now)

    if operation is Operation.UPLOAD:
        if identity is None:
            return Verdict(Outcome.DENY_AUTHENTICATION)
        return allow(AccessPath.OWNER)
    if operation is Operation.REVOKE_SHARE_LINK:
        owner_id = link.created_by
    elif operation in _OWNER_OPERATIONS:
        owner_id = file.user_id
    else:
        raise ValueError(f"Unknown operation {operation!r}")

    if _is_owner(identity, owner_id):
        return allow(AccessPath.OWNER)
    return Verdict(Outcome.DENY_NOT_OWNER)


def ensure_allowed(operation: Operation, verdict: Verdict) -> AccessPath:
    """Return the authorizing path or raise the error matching the denial."""
    if verdict.allowed:
        return verdict.via
    if verdict.outcome is Outcome.DENY_AUTHENTICATION:
        raise AuthenticationRequired()
    if verdict.outcome is Outcome.DENY_LINK_INVALID:
        raise LinkInvalid(verdict.link_reason)
    if verdict.outcome is Outcome.DENY_PRIVATE:
        raise AuthorizationDenied(
            "Access denied. This file is private.",
            reason=DenialReason.PRIVATE,
            needs_login=verdict.needs_login,
        )
    raise AuthorizationDenied(NOT_OWNER_MESSAGES[operation], reason=DenialReason.NOT_OWNER)
