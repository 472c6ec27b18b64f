from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from driveshare.core import authz
from driveshare.core.authz import AccessPath, Operation, Outcome
from driveshare.core.errors import (
    AuthenticationRequired,
    AuthorizationDenied,
    DenialReason,
    LinkInvalid,
    LinkInvalidReason,
)

NOW = datetime(2026, 3, 1, 12, 0, 0)
OWNER = SimpleNamespace(id=1)
STRANGER = SimpleNamespace(id=2)


def make_file(is_public=False, file_id=10):
    return SimpleNamespace(id=file_id, user_id=OWNER.id, is_public=is_public)


def make_link(**overrides):
    fields = dict(
        id=5,
        token="tok-123",
        file_id=10,
        created_by=OWNER.id,
        expires_at=NOW + timedelta(days=1),
        one_time_use=False,
        access_count=0,
        is_active=True,
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def download(file, identity=None, link=None, token=None):
    return authz.authorize(
        Operation.DOWNLOAD, identity=identity, file=file, link=link, share_token=token, now=NOW
    )


@pytest.mark.parametrize("identity", [None, OWNER, STRANGER])
def test_public_files_are_always_downloadable(identity):
    verdict = download(make_file(is_public=True), identity=identity)
    assert verdict.allowed
    assert verdict.via is AccessPath.PUBLIC


def test_private_file_anonymous_is_denied_with_login_hint():
    verdict = download(make_file())
    assert verdict.outcome is Outcome.DENY_PRIVATE
    assert verdict.needs_login


def test_private_file_stranger_is_denied_without_login_hint():
    verdict = download(make_file(), identity=STRANGER)
    assert verdict.outcome is Outcome.DENY_PRIVATE
    assert not verdict.needs_login


def test_private_file_owner_is_allowed():
    verdict = download(make_file(), identity=OWNER)
    assert verdict.allowed
    assert verdict.via is AccessPath.OWNER


def test_valid_share_token_wins_over_other_paths():
    link = make_link()
    for file in (make_file(), make_file(is_public=True)):
        verdict = download(file, identity=OWNER, link=link, token=link.token)
        assert verdict.via is AccessPath.SHARE_LINK


@pytest.mark.parametrize(
    "overrides,reason",
    [
        ({"is_active": False}, LinkInvalidReason.REVOKED),
        ({"expires_at": NOW - timedelta(seconds=1)}, LinkInvalidReason.EXPIRED),
        ({"one_time_use": True, "access_count": 1}, LinkInvalidReason.EXHAUSTED),
        ({"file_id": 99}, LinkInvalidReason.NOT_FOUND),
    ],
)
def test_invalid_share_token_on_private_file(overrides, reason):
    link = make_link(**overrides)
    verdict = download(make_file(), link=link, token=link.token)
    assert verdict.outcome is Outcome.DENY_LINK_INVALID
    assert verdict.link_reason is reason


def test_unknown_share_token():
    verdict = download(make_file(), token="nope")
    assert verdict.outcome is Outcome.DENY_LINK_INVALID
    assert verdict.link_reason is LinkInvalidReason.NOT_FOUND


def test_token_must_match_link_exactly():
    link = make_link()
    verdict = download(make_file(), link=link, token=link.token.upper())
    assert verdict.link_reason is LinkInvalidReason.NOT_FOUND


def test_invalid_token_falls_back_to_public_and_owner():
    link = make_link(is_active=False)
    assert download(make_file(is_public=True), link=link, token=link.token).via is AccessPath.PUBLIC
    assert download(make_file(), identity=OWNER, link=link, token=link.token).via is AccessPath.OWNER


@pytest.mark.parametrize(
    "operation",
    [Operation.TOGGLE_VISIBILITY, Operation.CREATE_SHARE_LINK, Operation.LIST_SHARE_LINKS],
)
def test_file_mutations_are_owner_only(operation):
    file = make_file(is_public=True)
    assert authz.authorize(operation, identity=OWNER, file=file).allowed
    for identity in (None, STRANGER, SimpleNamespace(id=3)):
        verdict = authz.authorize(operation, identity=identity, file=file)
        assert verdict.outcome is Outcome.DENY_NOT_OWNER


def test_share_token_never_authorizes_mutations():
    link = make_link()
    verdict = authz.authorize(
        Operation.TOGGLE_VISIBILITY, identity=STRANGER, file=make_file(), link=link, share_token=link.token
    )
    assert verdict.outcome is Outcome.DENY_NOT_OWNER


def test_revoke_requires_link_creator():
    link = make_link(created_by=STRANGER.id)
    assert authz.authorize(Operation.REVOKE_SHARE_LINK, identity=STRANGER, link=link).allowed
    verdict = authz.authorize(Operation.REVOKE_SHARE_LINK, identity=OWNER, link=link)
    assert verdict.outcome is Outcome.DENY_NOT_OWNER


def test_upload_requires_identity():
    assert authz.authorize(Operation.UPLOAD, identity=OWNER).allowed
    assert authz.authorize(Operation.UPLOAD).outcome is Outcome.DENY_AUTHENTICATION


def test_ensure_allowed_maps_denials_to_errors():
    assert authz.ensure_allowed(Operation.DOWNLOAD, authz.allow(AccessPath.OWNER)) is AccessPath.OWNER

    with pytest.raises(AuthorizationDenied) as exc:
        authz.ensure_allowed(Operation.DOWNLOAD, download(make_file()))
    assert exc.value.reason is DenialReason.PRIVATE
    assert exc.value.to_payload()["needsLogin"] is True

    with pytest.raises(AuthorizationDenied) as exc:
        authz.ensure_allowed(
            Operation.TOGGLE_VISIBILITY, authz.authorize(Operation.TOGGLE_VISIBILITY, identity=STRANGER, file=make_file())
        )
    assert exc.value.reason is DenialReason.NOT_OWNER

    with pytest.raises(LinkInvalid) as exc:
        authz.ensure_allowed(Operation.DOWNLOAD, download(make_file(), token="nope"))
    assert exc.value.reason is LinkInvalidReason.NOT_FOUND

    with pytest.raises(AuthenticationRequired):
        authz.ensure_allowed(Operation.UPLOAD, authz.authorize(Operation.UPLOAD))


def test_link_invalid_message_is_uniform():
    messages = {LinkInvalid(reason).to_payload()["message"] for reason in LinkInvalidReason}
    assert messages == {"Invalid or expired share link"}
