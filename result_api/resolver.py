from __future__ import annotations

import asyncio
import logging
import time
from datetime import date
from typing import Callable, Dict, List, Optional, Sequence

from .cache import MISSING, ResultCache
from .config import Settings
from .drawlog.candidates import (
    ALL_EXTENSIONS,
    EXTENDED_SLOTS,
    PREFERRED_EXTENSIONS,
    PRIORITY_SLOTS,
    date_first,
    exact_candidates,
    priority_first,
    without,
)
from .drawlog.models import ParsedResult, ProbeOutcome
from .drawlog.parser import format_date_fragment, parse_result_name
from .drawlog.selection import dedupe, results_on, select_for_date, slots_by_day, sort_newest_first
from .prober import ImageProber, coarse_cache_buster, fine_cache_buster
from .remote_index import RemoteIndexClient, RemoteIndexError

logger = logging.getLogger("resultweb")


class ResultResolver:
    """
    Finds which result image to show.

    One instance per page/session. Holds the session state: probe cache, the
    available-results collection, and the currently displayed result. All mutation
    happens on the event loop between awaits, so no locking.

    Entry points:
      fast_first_result()       sequential, short-circuits on the first hit
      result_for_datetime()     one (date, slot): index lookup, then name probing
      result_for_date()         best slot of one day
      all_available_results()   background listing / batched scan
    """

    def __init__(
        self,
        settings: Settings,
        prober: ImageProber,
        index: Optional[RemoteIndexClient] = None,
        *,
        cache: Optional[ResultCache] = None,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        self.settings = settings
        self.prober = prober
        self.index = index
        self.cache = cache if cache is not None else ResultCache()
        self._today = today or date.today

        self.available: List[ParsedResult] = []
        self.current: Optional[ParsedResult] = None
        self.user_interacted = False

        # bumped by a forced refresh; scans started under an older generation are discarded
        self.generation = 0
        self.background_task: Optional[asyncio.Task] = None
        self._cache_buster: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "ResultResolver":
        prober = ImageProber(settings.assets_base_url, default_timeout=settings.probe_timeout)
        index = None
        if settings.remote_index_enabled:
            index = RemoteIndexClient(settings.remote_index_url, timeout=settings.remote_index_timeout)
        return cls(settings, prober, index, **kwargs)

    async def aclose(self) -> None:
        if self.background_task is not None and not self.background_task.done():
            self.background_task.cancel()
            try:
                await self.background_task
            except asyncio.CancelledError:
                pass
        await self.prober.aclose()
        if self.index is not None:
            await self.index.aclose()

    def today(self) -> date:
        return self._today()

    # ------------------------------------------------------------------
    # probe + cache
    # ------------------------------------------------------------------
    async def _probe_cached(
        self,
        filename: str,
        timeout: float,
        *,
        remember_missing: bool = False,
    ) -> Optional[ParsedResult]:
        cached = self.cache.get(filename)
        if isinstance(cached, ParsedResult):
            return cached
        if cached is MISSING:
            return None

        outcome = await self.prober.probe(filename, timeout, cache_buster=self._cache_buster)
        if outcome is ProbeOutcome.FOUND:
            parsed = parse_result_name(filename)
            if parsed is not None:
                self.cache.put(filename, parsed)
            return parsed
        if outcome is ProbeOutcome.MISSING and remember_missing:
            self.cache.mark_missing(filename)
        return None

    async def _probe_in_batches(self, names: Sequence[str], timeout: float) -> List[ParsedResult]:
        size = max(1, int(self.settings.scan_batch_size))
        found: List[ParsedResult] = []
        for i in range(0, len(names), size):
            batch = names[i : i + size]
            results = await asyncio.gather(*(self._probe_cached(n, timeout) for n in batch))
            found.extend(r for r in results if r is not None)
            if i + size < len(names):
                await asyncio.sleep(self.settings.scan_batch_pause)
        return found

    # ------------------------------------------------------------------
    # FastFirstResult
    # ------------------------------------------------------------------
    async def fast_first_result(self, today: Optional[date] = None) -> Optional[ParsedResult]:
        started = time.perf_counter()
        names = priority_first(
            today or self.today(),
            self.settings.fast_lookback_days,
            PRIORITY_SLOTS,
            PREFERRED_EXTENSIONS,
        )
        for filename in names:
            # no tombstones here: today's result may be published any minute
            hit = await self._probe_cached(filename, self.settings.fast_probe_timeout)
            if hit is not None:
                logger.info("Fast path hit %s in %.0fms", filename, (time.perf_counter() - started) * 1000)
                return hit

        logger.info(
            "Fast path found nothing in %d candidates (%.0fms)",
            len(names),
            (time.perf_counter() - started) * 1000,
        )
        return None

    # ------------------------------------------------------------------
    # ResultForDateTime / ResultForDateAnyTime
    # ------------------------------------------------------------------
    async def result_for_datetime(self, d: date, slot: str) -> Optional[ParsedResult]:
        if self.index is not None:
            try:
                hit = await self.index.find(d, slot)
                if hit is not None:
                    logger.info("Index found %s", hit.filename)
                else:
                    logger.info("Index has no result for %s %s", format_date_fragment(d), slot)
                return hit
            except RemoteIndexError as e:
                logger.info("Index lookup unavailable (%s); probing names", e)

        # past days will not gain new uploads, so a 404 there is worth remembering
        remember = d < self.today()
        for filename in exact_candidates(d, slot, ALL_EXTENSIONS):
            hit = await self._probe_cached(filename, self.settings.probe_timeout, remember_missing=remember)
            if hit is not None:
                return hit

        logger.info("No result for %s %s", format_date_fragment(d), slot)
        return None

    async def result_for_date(self, d: date) -> Optional[ParsedResult]:
        same_day = results_on(self.available, d)
        if same_day:
            return select_for_date(same_day)

        for slot in PRIORITY_SLOTS:
            hit = await self.result_for_datetime(d, slot)
            if hit is not None:
                return hit
        return None

    # ------------------------------------------------------------------
    # AllAvailableResults
    # ------------------------------------------------------------------
    async def _scan_client_side(self, today: date) -> List[ParsedResult]:
        timeout = self.settings.probe_timeout
        primary = date_first(today, self.settings.background_lookback_days, PRIORITY_SLOTS, PREFERRED_EXTENSIONS)
        found = await self._probe_in_batches(primary, timeout)
        logger.info("Client-side scan: %d of %d candidates found", len(found), len(primary))
        if found:
            return found

        extended = without(
            date_first(today, self.settings.extended_lookback_days, EXTENDED_SLOTS, ALL_EXTENSIONS),
            primary,
        )
        found = await self._probe_in_batches(extended, timeout)
        logger.info("Extended scan: %d of %d candidates found", len(found), len(extended))
        return found

    async def all_available_results(self, today: Optional[date] = None) -> List[ParsedResult]:
        generation = self.generation
        day = today or self.today()

        results: List[ParsedResult] = []
        if self.index is not None:
            try:
                results = await self.index.list_results()
                logger.info("Index listed %d results", len(results))
            except RemoteIndexError as e:
                logger.info("Index listing unavailable (%s); scanning client-side", e)

        if not results:
            results = await self._scan_client_side(day)

        results = sort_newest_first(dedupe(results))

        if generation != self.generation:
            logger.info("Discarding results of a superseded scan (generation %d)", generation)
            return results

        self.available = results
        if results:
            self.offer_upgrade(results[0])
        return results

    # ------------------------------------------------------------------
    # display state
    # ------------------------------------------------------------------
    def offer_upgrade(self, candidate: ParsedResult) -> bool:
        """Replace the current result with a newer one found in the background, if allowed."""
        if self.current is None:
            if self.user_interacted:
                # the user is looking at an empty day on purpose
                return False
            self.current = candidate
            logger.info("Showing %s", candidate.filename)
            return True

        if candidate.date_time <= self.current.date_time:
            return False

        days_newer = (candidate.date - self.current.date).days
        if self.user_interacted and days_newer <= self.settings.upgrade_min_days:
            logger.info(
                "Not upgrading to %s: user is browsing and it is only %d day(s) newer",
                candidate.filename,
                days_newer,
            )
            return False

        logger.info("Upgrading %s -> %s", self.current.filename, candidate.filename)
        self.current = candidate
        return True

    async def start(self, today: Optional[date] = None) -> Optional[ParsedResult]:
        """Initial load: fast path now, wider scan in the background."""
        generation = self.generation
        found = await self.fast_first_result(today)
        if found is not None and generation == self.generation and not self.user_interacted:
            self.current = found
        self.background_task = asyncio.create_task(self._background(today))
        return found

    async def _background(self, today: Optional[date] = None) -> None:
        try:
            await self.all_available_results(today)
        except Exception:
            logger.exception("Background scan failed")

    async def wait_background(self) -> None:
        if self.background_task is not None:
            await self.background_task

    async def choose_datetime(self, d: date, slot: str) -> Optional[ParsedResult]:
        self.user_interacted = True
        self.current = await self.result_for_datetime(d, slot)
        return self.current

    async def choose_date(self, d: date) -> Optional[ParsedResult]:
        self.user_interacted = True
        self.current = await self.result_for_date(d)
        return self.current

    async def refresh(self, *, force: bool = False, today: Optional[date] = None) -> Optional[ParsedResult]:
        if self.index is not None:
            await self.index.clear_cache()

        if not force:
            await self.all_available_results(today)
            return self.current

        self.generation += 1
        self.cache.clear()
        self.available = []
        self.current = None
        self.user_interacted = False
        self._cache_buster = fine_cache_buster()
        try:
            found = await self.start(today)
        finally:
            self._cache_buster = None
        return found

    async def auto_refresh(self, stop: asyncio.Event, interval: Optional[float] = None) -> None:
        period = float(interval if interval is not None else self.settings.auto_refresh_seconds)
        while not stop.is_set():
            try:
                await asyncio.wait_for(stop.wait(), timeout=period)
                return
            except asyncio.TimeoutError:
                pass
            try:
                await self.refresh()
            except Exception:
                logger.exception("Auto-refresh failed")

    # ------------------------------------------------------------------
    # presentation data
    # ------------------------------------------------------------------
    def display_url(self, result: ParsedResult) -> str:
        buster = coarse_cache_buster() if result.date == self.today() else None
        return self.prober.url_for(result.filename, buster)

    def download_filename(self, result: Optional[ParsedResult] = None) -> str:
        r = result or self.current
        if r is None:
            return ""
        ext = r.extension or "webp"
        return f"{self.settings.download_prefix}-{format_date_fragment(r.date)}-{r.display_time}.{ext}"

    def calendar_marks(self, year: int, month: int) -> Dict[int, List[str]]:
        return slots_by_day(self.available, year, month)
