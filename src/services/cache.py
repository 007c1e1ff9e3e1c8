"""
ArticleCache - fans out over every source adapter, merges and deduplicates
the results, and holds them as an immutable generation behind a TTL.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Union

from core.entities import Article, CacheGeneration
from ingestion.base import SourceAdapter
from processing.deduplicator import deduplicate
from services.config import CacheConfig

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

DEFAULT_TTL_SECONDS = 600.0

EMPTY_GENERATION = CacheGeneration()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ArticleCache:
    """
    Holds exactly one current generation. A refresh builds a complete new
    generation and swaps it in with a single assignment; a failed refresh
    leaves the current generation untouched.

    Concurrent refresh triggers share one in-flight refresh task.
    """

    def __init__(
        self,
        adapters: Sequence[SourceAdapter],
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_concurrency: int = 8,
        adapter_timeout: float = 30.0,
        refresh_deadline: float = 120.0,
        clock: Clock = utcnow,
    ):
        self.adapters = list(adapters)
        self.ttl_seconds = ttl_seconds
        self.max_concurrency = max_concurrency
        self.adapter_timeout = adapter_timeout
        self.refresh_deadline = refresh_deadline
        self._clock = clock

        self._current: Optional[CacheGeneration] = None
        self._previous: Optional[CacheGeneration] = None
        self._inflight: Optional[asyncio.Task] = None

    @classmethod
    def from_config(
        cls,
        adapters: Sequence[SourceAdapter],
        config: CacheConfig,
        clock: Clock = utcnow,
    ) -> "ArticleCache":
        return cls(
            adapters,
            ttl_seconds=config.ttl_seconds,
            max_concurrency=config.max_concurrency,
            adapter_timeout=config.adapter_timeout,
            refresh_deadline=config.refresh_deadline,
            clock=clock,
        )

    def now(self) -> datetime:
        return self._clock()

    @property
    def current(self) -> CacheGeneration:
        return self._current or EMPTY_GENERATION

    @property
    def previous(self) -> Optional[CacheGeneration]:
        """Generation replaced by the last successful refresh."""
        return self._previous

    def is_stale(self) -> bool:
        generation = self._current
        if generation is None or not generation.articles:
            return True
        age = (self._clock() - generation.built_at).total_seconds()
        return age > self.ttl_seconds

    async def ensure_fresh(self) -> CacheGeneration:
        """Refresh if the TTL has elapsed or the cache is empty."""
        if self.is_stale():
            await self.refresh()
        return self.current

    async def refresh(self) -> CacheGeneration:
        """
        Rebuild the cache. Callers arriving while a refresh is running wait
        for that refresh instead of starting another one.
        """
        if self._inflight is None or self._inflight.done():
            self._inflight = asyncio.ensure_future(self._rebuild())

        # Shield so a cancelled caller does not cancel the shared refresh
        await asyncio.shield(self._inflight)
        return self.current

    async def _bounded(self, call: Callable[[], Awaitable[Any]], semaphore: asyncio.Semaphore) -> Any:
        async with semaphore:
            return await asyncio.wait_for(call(), timeout=self.adapter_timeout)

    async def fan_out(self, calls: Sequence[Callable[[], Awaitable[Any]]]) -> List[Union[Any, BaseException]]:
        """
        Run calls with at most max_concurrency in flight, each bounded by
        adapter_timeout and all of them by refresh_deadline.

        Returns one outcome per call, in call order: its result or the
        exception it raised. Calls still unfinished at the deadline are
        cancelled and reported as TimeoutError; finished results are kept.
        """
        if not calls:
            return []

        semaphore = asyncio.Semaphore(self.max_concurrency)
        tasks = [asyncio.ensure_future(self._bounded(call, semaphore)) for call in calls]
        _done, pending = await asyncio.wait(tasks, timeout=self.refresh_deadline)

        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.warning(f"Refresh deadline reached, {len(pending)} calls cancelled")

        outcomes: List[Union[Any, BaseException]] = []
        for task in tasks:
            if task in pending:
                outcomes.append(asyncio.TimeoutError(f"cancelled after {self.refresh_deadline}s deadline"))
            elif task.exception() is not None:
                outcomes.append(task.exception())
            else:
                outcomes.append(task.result())
        return outcomes

    def _merge(self, outcomes: List[Union[List[Article], BaseException]]) -> List[Article]:
        collected: List[Article] = []
        failed = 0

        for adapter, outcome in zip(self.adapters, outcomes):
            if isinstance(outcome, BaseException):
                failed += 1
                logger.error(
                    f"Source {adapter.name} failed: {outcome.__class__.__name__}: {outcome}"
                )
                continue
            collected.extend(outcome)

        if failed:
            logger.warning(f"{failed}/{len(self.adapters)} sources contributed no articles")

        articles = deduplicate(collected)
        articles.sort(key=lambda a: a.published_at, reverse=True)
        return articles

    async def _rebuild(self) -> None:
        logger.info(f"Refreshing cache from {len(self.adapters)} sources")

        try:
            outcomes = await self.fan_out([adapter.fetch for adapter in self.adapters])
            articles = self._merge(outcomes)
            generation = CacheGeneration(articles=tuple(articles), built_at=self._clock())
        except Exception as e:
            logger.exception(f"Cache refresh failed, keeping previous generation: {e}")
            return

        self._previous, self._current = self._current, generation
        logger.info(f"Cache updated with {len(generation.articles)} articles")
