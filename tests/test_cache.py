import asyncio
from datetime import timedelta

from conftest import NOW, FakeAdapter, FakeClock, make_article

from services.cache import ArticleCache
from services.config import CacheConfig


def test_ttl_controls_refetch(clock):
    adapter = FakeAdapter("feed", [make_article("Cotton prices steady")])
    cache = ArticleCache([adapter], ttl_seconds=600, clock=clock)

    async def scenario():
        await cache.ensure_fresh()
        assert adapter.calls == 1

        clock.advance(300)
        await cache.ensure_fresh()
        assert adapter.calls == 1

        clock.advance(301)
        await cache.ensure_fresh()
        assert adapter.calls == 2

        await cache.ensure_fresh()
        assert adapter.calls == 2

    asyncio.run(scenario())


def test_empty_cache_is_always_stale(clock):
    adapter = FakeAdapter("empty")
    cache = ArticleCache([adapter], clock=clock)

    async def scenario():
        await cache.ensure_fresh()
        await cache.ensure_fresh()

    asyncio.run(scenario())
    assert adapter.calls == 2
    assert cache.current.articles == ()


def test_failing_adapter_does_not_block_others(clock):
    good = FakeAdapter("good", [make_article("Yarn exports rise")])
    bad = FakeAdapter("bad", error=RuntimeError("feed exploded"))
    cache = ArticleCache([bad, good], clock=clock)

    generation = asyncio.run(cache.refresh())

    assert [a.title for a in generation.articles] == ["Yarn exports rise"]
    assert generation.built_at == NOW


def test_slow_adapter_is_dropped(clock):
    fast = FakeAdapter("fast", [make_article("Denim demand firm")])
    slow = FakeAdapter("slow", [make_article("Late story")], delay=1.0)
    cache = ArticleCache([fast, slow], adapter_timeout=0.05, clock=clock)

    generation = asyncio.run(cache.refresh())

    assert [a.title for a in generation.articles] == ["Denim demand firm"]


def test_concurrent_refreshes_share_one_fetch(clock):
    adapter = FakeAdapter("feed", [make_article("Viscose prices slip")], delay=0.05)
    cache = ArticleCache([adapter], clock=clock)

    async def scenario():
        return await asyncio.gather(
            cache.ensure_fresh(),
            cache.ensure_fresh(),
            cache.refresh(),
        )

    results = asyncio.run(scenario())

    assert adapter.calls == 1
    assert all(r is results[0] for r in results)


def test_failed_refresh_keeps_current_generation(clock, monkeypatch):
    adapter = FakeAdapter("feed", [make_article("Spinning mills restart")])
    cache = ArticleCache([adapter], clock=clock)

    asyncio.run(cache.refresh())
    before = cache.current

    def broken_merge(outcomes):
        raise RuntimeError("merge failed")

    monkeypatch.setattr(cache, "_merge", broken_merge)
    clock.advance(1000)
    after = asyncio.run(cache.refresh())

    assert after is before
    assert cache.previous is None


def test_generation_swap_keeps_previous(clock):
    adapter = FakeAdapter("feed", [make_article("Garment orders return")])
    cache = ArticleCache([adapter], clock=clock)

    first = asyncio.run(cache.refresh())
    clock.advance(700)
    second = asyncio.run(cache.refresh())

    assert second is not first
    assert cache.previous is first
    assert second.built_at == NOW + timedelta(seconds=700)


def test_articles_sorted_newest_first_and_deduplicated(clock):
    older = make_article("Cotton crop estimate cut", NOW - timedelta(days=2))
    newest = make_article("Yarn prices ease in Tiruppur", NOW - timedelta(hours=1))
    middle = make_article("Bangladesh apparel exports climb", NOW - timedelta(days=1))
    duplicate = make_article("Yarn Prices Ease in Tiruppur!", NOW - timedelta(hours=3))

    cache = ArticleCache(
        [FakeAdapter("a", [older, newest]), FakeAdapter("b", [middle, duplicate])],
        clock=clock,
    )
    generation = asyncio.run(cache.refresh())

    assert list(generation.articles) == [newest, middle, older]


def test_from_config():
    config = CacheConfig(ttl_seconds=60, max_concurrency=2, adapter_timeout=5, refresh_deadline=10)
    cache = ArticleCache.from_config([], config, clock=FakeClock())

    assert cache.ttl_seconds == 60
    assert cache.max_concurrency == 2
    assert cache.adapter_timeout == 5
    assert cache.refresh_deadline == 10
    assert cache.now() == NOW


def test_refresh_deadline_keeps_finished_sources(clock):
    """Sources still running at the deadline are cancelled; finished ones are kept."""
    fast = FakeAdapter("fast", [make_article("Cotton yarn exports rise")])
    slow = [
        FakeAdapter(f"slow-{i}", [make_article(f"Late mill report {i}")], delay=0.25)
        for i in range(3)
    ]
    cache = ArticleCache(
        [fast, *slow],
        adapter_timeout=0.3,
        max_concurrency=1,
        refresh_deadline=0.5,
        clock=clock,
    )

    generation = asyncio.run(cache.refresh())

    titles = [a.title for a in generation.articles]
    assert "Cotton yarn exports rise" in titles
    assert len(titles) < 4
    assert generation.built_at == NOW
    assert fast.calls == 1


def test_fan_out_respects_max_concurrency(clock):
    in_flight = {"now": 0, "peak": 0}

    class TrackedAdapter(FakeAdapter):
        async def fetch(self):
            in_flight["now"] += 1
            in_flight["peak"] = max(in_flight["peak"], in_flight["now"])
            try:
                await asyncio.sleep(0.01)
                return await super().fetch()
            finally:
                in_flight["now"] -= 1

    adapters = [TrackedAdapter(f"feed-{i}", [make_article(f"Weaving story {i}")]) for i in range(6)]
    cache = ArticleCache(adapters, max_concurrency=2, clock=clock)

    generation = asyncio.run(cache.refresh())

    assert in_flight["peak"] == 2
    assert len(generation.articles) == 6


def test_fan_out_reports_outcomes_in_call_order(clock):
    cache = ArticleCache([], adapter_timeout=0.05, clock=clock)

    async def ok():
        return "ok"

    async def boom():
        raise ValueError("bad payload")

    async def hang():
        await asyncio.sleep(1)

    outcomes = asyncio.run(cache.fan_out([ok, boom, hang]))

    assert outcomes[0] == "ok"
    assert isinstance(outcomes[1], ValueError)
    assert isinstance(outcomes[2], asyncio.TimeoutError)
    assert asyncio.run(cache.fan_out([])) == []
