import pytest

from cityloops.services.engagement_service import EngagementService
from cityloops.services.loop_service import LoopService
from cityloops.services.search_service import SearchService
from cityloops.utils.exceptions import ValidationFailedError


@pytest.fixture
async def catalog(db, make_user, loop_payload, place):
    """
    검색용 루프 묶음
    - Tokyo Ramen (food)       좋아요 2, 댓글 0
    - Kyoto Temples (culture)  좋아요 0, 댓글 2
    - Tokyo Parks (nature)     좋아요 1, 댓글 1
    - Secret Tokyo (food)      비공개
    """
    owner = await make_user(name="Curator")
    fans = [await make_user() for _ in range(2)]
    loops = LoopService(db)
    engagement = EngagementService(db)

    ramen = await loops.create_loop(owner.id, loop_payload(
        title="Tokyo Ramen", city="Tokyo", tags=["food", "night"],
        description="Slurp your way through Shinjuku",
    ))
    temples = await loops.create_loop(owner.id, loop_payload(
        title="Kyoto Temples", city="Kyoto", tags=["culture"],
        description="Quiet mornings", places=[place("Kinkaku-ji", "Attraction")],
    ))
    parks = await loops.create_loop(owner.id, loop_payload(
        title="Tokyo Parks", city="tokyo", tags=["nature"],
        description="Green escapes",
    ))
    await loops.create_loop(owner.id, loop_payload(
        title="Secret Tokyo", city="Tokyo", tags=["food"],
        description="Draft", published=False,
    ))

    for fan in fans:
        await engagement.toggle_like(fan.id, ramen.id)
    await engagement.toggle_like(fans[0].id, parks.id)
    for fan in fans:
        await engagement.create_comment(
            fan.id, {"content": "Great", "loopId": temples.id, "userId": fan.id}
        )
    await engagement.create_comment(
        fans[0].id, {"content": "Nice", "loopId": parks.id, "userId": fans[0].id}
    )
    return {"owner": owner, "fans": fans, "ramen": ramen, "temples": temples, "parks": parks}


def _titles(result):
    return [row.loop.title for row in result.loops]


async def test_default_search_lists_published_newest_first(db, catalog):
    result = await SearchService(db).search_loops()

    assert _titles(result) == ["Tokyo Parks", "Kyoto Temples", "Tokyo Ramen"]
    assert result.total == 3
    assert (result.page, result.pages) == (1, 1)


async def test_query_matches_text_and_tags_case_insensitively(db, catalog):
    service = SearchService(db)

    assert _titles(await service.search_loops(query="shinjuku")) == ["Tokyo Ramen"]
    assert _titles(await service.search_loops(query="CULTURE")) == ["Kyoto Temples"]
    assert _titles(await service.search_loops(query="tokyo", sort_by="oldest")) == [
        "Tokyo Ramen", "Tokyo Parks",
    ]


async def test_query_escapes_like_wildcards(db, catalog):
    result = await SearchService(db).search_loops(query="%")
    assert result.total == 0


async def test_city_filter_is_case_insensitive_exact(db, catalog):
    result = await SearchService(db).search_loops(city="TOKYO", sort_by="oldest")
    assert _titles(result) == ["Tokyo Ramen", "Tokyo Parks"]

    assert (await SearchService(db).search_loops(city="Tok")).total == 0


async def test_tags_filter_matches_any(db, catalog):
    result = await SearchService(db).search_loops(tags=["night", "culture"], sort_by="oldest")
    assert _titles(result) == ["Tokyo Ramen", "Kyoto Temples"]


async def test_filters_combine_with_and(db, catalog):
    result = await SearchService(db).search_loops(city="tokyo", tags=["nature"])
    assert _titles(result) == ["Tokyo Parks"]


@pytest.mark.parametrize(
    "sort_by, expected",
    [
        ("most-liked", ["Tokyo Ramen", "Tokyo Parks", "Kyoto Temples"]),
        ("most-commented", ["Kyoto Temples", "Tokyo Parks", "Tokyo Ramen"]),
        ("oldest", ["Tokyo Ramen", "Kyoto Temples", "Tokyo Parks"]),
    ],
)
async def test_sort_orders(db, catalog, sort_by, expected):
    assert _titles(await SearchService(db).search_loops(sort_by=sort_by)) == expected


async def test_pagination_slices_and_reports_total(db, catalog):
    service = SearchService(db)

    first = await service.search_loops(sort_by="oldest", page=1, limit=2)
    second = await service.search_loops(sort_by="oldest", page=2, limit=2)

    assert _titles(first) == ["Tokyo Ramen", "Kyoto Temples"]
    assert _titles(second) == ["Tokyo Parks"]
    assert (first.total, first.pages, second.total) == (3, 2, 3)


async def test_limit_is_capped(db, catalog):
    result = await SearchService(db).search_loops(limit=10_000)
    assert result.limit == 50


async def test_counts_and_viewer_like_state(db, catalog):
    fan = catalog["fans"][0]
    result = await SearchService(db).search_loops(sort_by="oldest", viewer_id=fan.id)

    assert [(r.like_count, r.comment_count, r.is_liked) for r in result.loops] == [
        (2, 0, True), (0, 2, False), (1, 1, True),
    ]
    assert [r.place_count for r in result.loops] == [2, 1, 2]


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"sort_by": "random"}, "Sort order must be one of newest, oldest, most-liked, most-commented"),
        ({"page": 0}, "Page must be a positive integer"),
        ({"limit": 0}, "Limit must be a positive integer"),
    ],
)
async def test_invalid_search_params(db, kwargs, message):
    with pytest.raises(ValidationFailedError) as exc_info:
        await SearchService(db).search_loops(**kwargs)
    assert exc_info.value.message == message


async def test_filter_options_only_from_published(db, catalog):
    cities, tags = await SearchService(db).filter_options()

    assert cities == ["Kyoto", "Tokyo", "tokyo"]
    assert tags == ["culture", "food", "nature", "night"]


async def test_popular_and_stats(db, catalog):
    service = SearchService(db)

    popular = await service.popular_loops(limit=1)
    stats = await service.stats()

    assert _titles_of(popular) == ["Tokyo Ramen"]
    assert stats.total_loops == 3
    assert stats.total_users == 3
    assert stats.total_places == 2 + 1 + 2 + 2
    assert stats.total_comments == 3


async def test_featured_loops_excludes_unflagged(db, catalog):
    catalog["temples"].featured = True
    await db.commit()

    assert _titles_of(await SearchService(db).featured_loops()) == ["Kyoto Temples"]


def _titles_of(rows):
    return [row.loop.title for row in rows]
