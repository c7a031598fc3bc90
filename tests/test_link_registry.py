import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import FlushError

from releasehub.exceptions.exceptions import LinkNotFoundError
from releasehub.services.link_registry import LINK_TOKEN_BYTES

RELEASE_ID = "20260216T013000+0000_000"
OTHER_RELEASE_ID = "20260216T013001+0000_000"


def test_create_links_mints_one_token_per_subscriber(registry):
    links = registry.create_links(["s1", "s2", "s3"], RELEASE_ID)

    assert [link.subscriber_id for link in links] == ["s1", "s2", "s3"]
    assert len({link.id for link in links}) == 3
    assert {link.release_id for link in links} == {RELEASE_ID}
    assert len({link.created_at for link in links}) == 1
    for link in links:
        # url-safe base64 of the token bytes, no padding
        assert len(link.id) >= LINK_TOKEN_BYTES
        assert registry.get(link.id) == link


def test_create_links_with_no_subscribers_is_a_no_op(registry):
    assert registry.create_links([], RELEASE_ID) == []


@pytest.mark.parametrize("link_id", ["", "missing-token"])
def test_get_unknown_link_is_not_found(registry, link_id):
    with pytest.raises(LinkNotFoundError):
        registry.get(link_id)


def test_create_links_is_all_or_nothing(registry, monkeypatch):
    monkeypatch.setattr("releasehub.services.link_registry.new_link_token", lambda: "same-token")

    with pytest.raises((IntegrityError, FlushError)):
        registry.create_links(["s1", "s2"], RELEASE_ID)

    with pytest.raises(LinkNotFoundError):
        registry.get("same-token")


def test_remove_where_drops_matching_links(registry):
    kept = registry.create_links(["s1"], OTHER_RELEASE_ID)[0]
    dropped = registry.create_links(["s1", "s2"], RELEASE_ID)

    removed = registry.remove_where(lambda _sub_id, rel_id: rel_id == RELEASE_ID)

    assert removed == 2
    assert registry.get(kept.id) == kept
    for link in dropped:
        with pytest.raises(LinkNotFoundError):
            registry.get(link.id)


def test_remove_subscriber_links(registry):
    mine = registry.create_links(["s1"], RELEASE_ID)[0]
    theirs = registry.create_links(["s2"], RELEASE_ID)[0]

    assert registry.remove_subscriber_links("s1") == 1
    assert registry.remove_subscriber_links("s1") == 0

    with pytest.raises(LinkNotFoundError):
        registry.get(mine.id)
    assert registry.get(theirs.id) == theirs


def test_remove_release_links(registry):
    registry.create_links(["s1", "s2"], RELEASE_ID)
    other = registry.create_links(["s1"], OTHER_RELEASE_ID)[0]

    assert registry.remove_release_links(RELEASE_ID) == 2
    assert registry.get(other.id) == other
