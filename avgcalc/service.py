"""Request-level orchestration: fetch, merge, average."""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Any
from .categories import Category, build_categories, resolve_category
from .constants import AVG_DECIMALS, DEFAULT_PROCESSING_WARN_MS
from .fetcher import NumberFetcher
from .logging import get_logger
from .window import Number, SlidingWindow

logger = get_logger(__name__)


@dataclass
class RequestResult:
    """Outcome of one /numbers call; never stored."""
    window_prev_state: List[Number]
    window_curr_state: List[Number]
    numbers: List[Number] = field(default_factory=list)
    avg: float = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "windowPrevState": self.window_prev_state,
            "windowCurrState": self.window_curr_state,
            "numbers": self.numbers,
            "avg": round(self.avg, AVG_DECIMALS),
        }


class AverageService:
    """Runs the fetch-then-merge flow against one shared window."""

    def __init__(
        self,
        fetcher: NumberFetcher,
        window: SlidingWindow,
        endpoints: Dict[str, str],
        warn_ms: int = DEFAULT_PROCESSING_WARN_MS,
    ):
        """
        Initialize service.

        Args:
            fetcher: Upstream client
            window: Shared window instance
            endpoints: Mapping of category id to upstream URL
            warn_ms: Processing time above which a warning is logged
        """
        self.fetcher = fetcher
        self.window = window
        self.categories: Dict[str, Category] = build_categories(endpoints)
        self.warn_ms = warn_ms

    def process(self, category_id: str) -> RequestResult:
        """
        Fetch numbers for a category and fold them into the window.

        Args:
            category_id: One of p, f, e, r

        Returns:
            RequestResult with the window before and after the merge

        Raises:
            InvalidCategory: Before any fetch, if the id is unknown
            UpstreamError: If the fetch fails; the window is left untouched
        """
        start = time.monotonic()
        category = resolve_category(self.categories, category_id)

        numbers = self.fetcher.fetch(category)
        previous, current, avg = self.window.update(numbers)

        elapsed_ms = (time.monotonic() - start) * 1000
        if elapsed_ms > self.warn_ms:
            logger.warning(f"Processing time close to limit: {elapsed_ms:.0f}ms for category {category.id}")

        logger.info(
            f"Category {category.id}: fetched={len(numbers)} window={len(current)}/{self.window.capacity} avg={avg:.2f}"
        )
        return RequestResult(
            window_prev_state=previous,
            window_curr_state=current,
            numbers=list(numbers),
            avg=avg,
        )
