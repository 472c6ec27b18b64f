from datetime import timedelta

import pytest

from driveshare import crud
from driveshare.core import clock, sharing
from driveshare.core.errors import LinkInvalid, LinkInvalidReason, ValidationError
from driveshare.db.session import SessionLocal
from driveshare.models.file import File
from driveshare.models.share import ShareLink
from driveshare.services import file_service


def create_link(db, file, owner, now, days=1, one_time_use=False):
    return crud.share_link.create_for_file(
        db, file_id=file.id, creator_id=owner.id, expires_in_days=days, one_time_use=one_time_use, now=now
    )


def test_create_sets_initial_state(db, alice, make_file):
    now = clock.utcnow()
    file = make_file(alice)
    link = create_link(db, file, alice, now, days=7, one_time_use=True)
    assert link.expires_at == now + timedelta(days=7)
    assert link.access_count == 0
    assert link.last_accessed_at is None
    assert link.is_active
    assert link.one_time_use
    assert link.created_by == alice.id
    assert sharing.link_state(link, now) is sharing.LinkState.ACTIVE_UNUSED


@pytest.mark.parametrize("days", [0, 31])
def test_create_rejects_bad_day_count_without_writing(db, alice, make_file, days):
    file = make_file(alice)
    with pytest.raises(ValidationError):
        create_link(db, file, alice, clock.utcnow(), days=days)
    assert db.query(ShareLink).count() == 0


def test_tokens_are_unique_per_link(db, alice, make_file):
    file = make_file(alice)
    now = clock.utcnow()
    tokens = {create_link(db, file, alice, now).token for _ in range(10)}
    assert len(tokens) == 10


def test_lookup_by_token_is_exact(db, alice, make_file):
    link = create_link(db, make_file(alice), alice, clock.utcnow())
    assert crud.share_link.get_by_token(db, token=link.token).id == link.id
    assert crud.share_link.get_by_token(db, token=link.token.swapcase()) is None
    assert crud.share_link.get_by_token(db, token=link.token[:-1]) is None


def test_record_access_counts_and_stamps(db, alice, make_file):
    now = clock.utcnow()
    link = create_link(db, make_file(alice), alice, now)
    assert crud.share_link.record_access(db, link=link, now=now)
    assert crud.share_link.record_access(db, link=link, now=now + timedelta(minutes=1))
    assert link.access_count == 2
    assert link.last_accessed_at == now + timedelta(minutes=1)


def test_one_time_link_can_only_be_consumed_once(db, alice, make_file):
    now = clock.utcnow()
    link = create_link(db, make_file(alice), alice, now, one_time_use=True)
    assert crud.share_link.record_access(db, link=link, now=now)
    assert not crud.share_link.record_access(db, link=link, now=now)
    assert link.access_count == 1
    assert sharing.invalid_reason(link, now) is sharing.LinkInvalidReason.EXHAUSTED


def test_concurrent_consumers_of_one_time_link(db, alice, make_file):
    now = clock.utcnow()
    link = create_link(db, make_file(alice), alice, now, one_time_use=True)

    other = SessionLocal()
    try:
        # Both sessions hold a snapshot that still looks unused
        stale = other.get(ShareLink, link.id)
        assert stale.access_count == 0
        assert crud.share_link.record_access(db, link=link, now=now)
        assert not crud.share_link.record_access(other, link=stale, now=now)
        assert stale.access_count == 1
    finally:
        other.close()


def test_record_access_refuses_expired_or_revoked(db, alice, make_file):
    now = clock.utcnow()
    file = make_file(alice)
    expired = create_link(db, file, alice, now)
    assert not crud.share_link.record_access(db, link=expired, now=now + timedelta(days=2))
    assert expired.access_count == 0

    revoked = crud.share_link.revoke(db, link=create_link(db, file, alice, now))
    assert not crud.share_link.record_access(db, link=revoked, now=now)


def test_revoke_is_idempotent(db, alice, make_file):
    link = create_link(db, make_file(alice), alice, clock.utcnow())
    assert crud.share_link.revoke(db, link=link).is_active is False
    assert crud.share_link.revoke(db, link=link).is_active is False


def test_active_links_listing(db, alice, make_file):
    file = make_file(alice)
    now = clock.utcnow()
    first = create_link(db, file, alice, now)
    second = create_link(db, file, alice, now + timedelta(seconds=1))
    revoked = crud.share_link.revoke(db, link=create_link(db, file, alice, now))
    create_link(db, make_file(alice), alice, now)

    ids = [link.id for link in crud.share_link.get_active_for_file(db, file_id=file.id)]
    assert ids == [second.id, first.id]
    assert revoked.id not in ids


def test_download_with_stale_link_loses_the_race(db, alice, make_file):
    now = clock.utcnow()
    file = make_file(alice)
    link = create_link(db, file, alice, now, one_time_use=True)

    other = SessionLocal()
    try:
        stale_link = other.get(ShareLink, link.id)
        stale_file = other.get(File, file.id)
        assert crud.share_link.record_access(db, link=link, now=now)

        with pytest.raises(LinkInvalid) as excinfo:
            file_service.prepare_download(
                other, file=stale_file, share_token=link.token, link=stale_link, now=now
            )
        assert excinfo.value.reason is LinkInvalidReason.EXHAUSTED
    finally:
        other.close()

    db.refresh(file)
    assert file.download_count == 0
