"""Feed cursor pagination and filters."""
import base64
import json
import uuid
from datetime import date, datetime, timedelta, timezone

import pytest

from oncoshare.db.enums import FeedStatus
from oncoshare.geo.zones import SOUTH_WEST
from oncoshare.schemas.feed import FeedFilter
from oncoshare.services.feed_query_service import FEED_UNAVAILABLE, INVALID_CURSOR, FeedQueryEngine
from oncoshare.utils.pagination import decode_cursor, encode_cursor

T0 = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


async def _all_pages(engine: FeedQueryEngine, feed_filter: FeedFilter, limit: int):
    items, cursor, pages = [], None, 0
    while True:
        result = await engine.query(feed_filter, cursor=cursor, limit=limit)
        assert result.warning is None
        items.extend(result.value.items)
        pages += 1
        cursor = result.value.next_cursor
        if cursor is None:
            return items, pages


@pytest.mark.anyio
async def test_only_published_posts_are_visible(session_factory, factory):
    published = factory.post(T0)
    factory.post(T0, status=FeedStatus.DRAFT)
    factory.post(T0, status=FeedStatus.MODERATION)

    result = await FeedQueryEngine(session_factory).query()

    assert [item.id for item in result.value.items] == [published.id]
    assert result.value.next_cursor is None


@pytest.mark.anyio
async def test_cursor_pages_concatenate_to_one_unbounded_fetch(session_factory, factory):
    clinic = factory.clinic()
    for index in range(9):
        # Pairs share a timestamp to exercise the id tie-breaker.
        factory.post(T0 - timedelta(minutes=index // 2), clinic=clinic if index % 3 else None)
    engine = FeedQueryEngine(session_factory)

    everything = (await engine.query(FeedFilter(), limit=100)).value.items
    paged, pages = await _all_pages(engine, FeedFilter(), limit=2)

    assert len(everything) == 9
    assert [item.id for item in paged] == [item.id for item in everything]
    assert len({item.id for item in paged}) == 9
    assert pages == 5


@pytest.mark.anyio
async def test_exact_multiple_of_limit_has_no_trailing_cursor(session_factory, factory):
    for index in range(4):
        factory.post(T0 - timedelta(hours=index))
    engine = FeedQueryEngine(session_factory)

    first = await engine.query(limit=2)
    second = await engine.query(cursor=first.value.next_cursor, limit=2)

    assert first.value.next_cursor is not None
    assert len(second.value.items) == 2
    assert second.value.next_cursor is None


@pytest.mark.anyio
async def test_clinic_filter_includes_global_posts(session_factory, factory):
    mine = factory.clinic("Mine", "Lagos")
    theirs = factory.clinic("Theirs", "Kano")
    own = factory.post(T0, clinic=mine)
    global_post = factory.post(T0 - timedelta(hours=1))
    factory.post(T0 - timedelta(hours=2), clinic=theirs)

    result = await FeedQueryEngine(session_factory).query(FeedFilter(clinic_id=mine.id))

    assert [item.id for item in result.value.items] == [own.id, global_post.id]


@pytest.mark.anyio
async def test_zone_filter_goes_through_owning_clinic(session_factory, factory):
    lagos = factory.clinic("Lagos Vets", "LAGOS")
    ogun = factory.clinic("Ogun Vets", "ogun")
    kano = factory.clinic("Kano Vets", "Kano")
    expected = [factory.post(T0, clinic=lagos).id, factory.post(T0 - timedelta(hours=1), clinic=ogun).id]
    factory.post(T0, clinic=kano)
    factory.post(T0)

    result = await FeedQueryEngine(session_factory).query(FeedFilter(zone="south_west"))

    assert [item.id for item in result.value.items] == expected
    assert {item.geo_zone for item in result.value.items} == {SOUTH_WEST}


@pytest.mark.anyio
async def test_state_and_date_filters(session_factory, factory):
    lagos = factory.clinic("Lagos Vets", "Lagos")
    inside = factory.post(T0, clinic=lagos)
    factory.post(T0 - timedelta(days=3), clinic=lagos)
    factory.post(T0, clinic=factory.clinic("Kano Vets", "Kano"))

    result = await FeedQueryEngine(session_factory).query(
        FeedFilter(state="LA", date_from=date(2025, 6, 1), date_to=date(2025, 6, 1))
    )

    assert [item.id for item in result.value.items] == [inside.id]


@pytest.mark.anyio
async def test_malformed_cursor_degrades_with_warning(session_factory, factory):
    factory.post(T0)

    result = await FeedQueryEngine(session_factory).query(cursor="not-a-cursor")

    assert result.value.items == []
    assert result.value.next_cursor is None
    assert result.warning == INVALID_CURSOR


@pytest.mark.anyio
async def test_query_failure_degrades_with_warning():
    def broken_factory():
        raise RuntimeError("database unavailable")

    result = await FeedQueryEngine(broken_factory).query()

    assert result.value.items == []
    assert result.value.next_cursor is None
    assert result.warning == FEED_UNAVAILABLE


def test_cursor_round_trip():
    post_id = uuid.uuid4()
    cursor = decode_cursor(encode_cursor(T0, post_id))

    assert cursor.created_at == T0
    assert cursor.post_id == post_id


def test_naive_cursor_timestamp_is_read_as_utc():
    post_id = uuid.uuid4()
    payload = json.dumps({"t": "2025-06-01T12:00:00", "id": str(post_id)})
    cursor = base64.urlsafe_b64encode(payload.encode()).decode().rstrip("=")

    position = decode_cursor(cursor)

    assert position.created_at == T0
    assert position.created_at.tzinfo is not None
