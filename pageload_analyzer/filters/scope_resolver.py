"""
Scope filtering: keep only the occurrences of one page load.
"""

import logging
from typing import FrozenSet, Iterable, List, Sequence

from ..core.errors import ScopeError
from ..core.types import Occurrence

logger = logging.getLogger(__name__)

# Milestones emitted once globally and once per navigation. The first
# occurrence of each is the global one.
DUPLICATED_BOOKKEEPING_NAMES: FrozenSet[str] = frozenset({
    'navigationStart',
    'responseEnd',
    'domLoading',
    'domInteractive',
    'domContentLoadedEventStart',
    'domContentLoadedEventEnd',
    'domComplete',
})


class ScopeResolver:
    """Filters occurrences to those belonging to the target page load."""

    def __init__(self, config):
        """
        Initialize with analysis configuration.

        Args:
            config: AnalysisConfig instance
        """
        self.config = config

    def resolve_by_navigation(self, occurrences: Sequence[Occurrence], url: str) -> List[Occurrence]:
        """
        Scope a navigation-keyed trace to the page load of `url`.

        The first occurrence whose document URL is `url` is the anchor. Its
        navigation id and frame id select the rest of the page load.

        Args:
            occurrences: Chronologically sorted occurrences
            url: Target page URL

        Returns:
            Scoped occurrences, in the input order

        Raises:
            ScopeError: If no anchor matches `url` or the anchor lacks ids
        """
        anchor = next((o for o in occurrences if o.url == url), None)
        if anchor is None:
            raise ScopeError(f"Failed to find event with documentLoaderURL {url}")
        if anchor.navigation_id is None or anchor.frame_id is None:
            raise ScopeError(
                f"Event {anchor.name} with documentLoaderURL {url} has no navigationId and/or frame"
            )
        logger.debug(f"navigation_id = {anchor.navigation_id}, frame = {anchor.frame_id}")

        allowed = self.config.url_agnostic_categories
        relevant = [
            o for o in occurrences
            if o.navigation_id == anchor.navigation_id
            or o.frame_id == anchor.frame_id
            or o.category in allowed
        ]
        return self.drop_global_duplicates(relevant)

    @staticmethod
    def drop_global_duplicates(occurrences: Iterable[Occurrence]) -> List[Occurrence]:
        """Remove the first occurrence of each duplicated bookkeeping name."""
        seen = set()
        result = []
        for occurrence in occurrences:
            if occurrence.name in DUPLICATED_BOOKKEEPING_NAMES and occurrence.name not in seen:
                seen.add(occurrence.name)
                continue
            result.append(occurrence)
        return result

    @staticmethod
    def resolve_by_url(
        occurrences: Sequence[Occurrence],
        url: str,
        url_exempt_categories: FrozenSet[str],
        require_match: bool = True
    ) -> List[Occurrence]:
        """
        Scope a URL-keyed trace to the page load of `url`.

        Occurrences with a different URL belong to other frames and are
        dropped. Categories in `url_exempt_categories` carry no URL and are
        always kept.

        Args:
            occurrences: Chronologically sorted occurrences
            url: Target page URL
            url_exempt_categories: Categories kept regardless of URL
            require_match: If False, occurrences without any URL are kept and
                           the trace need not mention `url` at all

        Raises:
            ScopeError: If `require_match` and no occurrence has URL `url`
        """
        def keep(occurrence: Occurrence) -> bool:
            if occurrence.url == url or occurrence.category in url_exempt_categories:
                return True
            return not require_match and occurrence.url is None

        relevant = [o for o in occurrences if keep(o)]
        if require_match and not any(o.url == url for o in relevant):
            raise ScopeError(f"No entry with matching metadata url {url}")
        return relevant

