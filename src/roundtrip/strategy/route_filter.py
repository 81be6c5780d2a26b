"""
Venue fee ceiling for candidate routes.

Aggregator routes can pass through venues that charge an unusually high
platform fee. Such a fee wipes out the thin margin of a round trip, so the
first candidate whose hops all stay under the ceiling is chosen.
"""

import logging
from collections.abc import Sequence

from roundtrip.core.types import Route


logger = logging.getLogger(__name__)


class RouteFilter:
    """
    Selects the best route that respects a per-hop fee ceiling.

    Candidates are expected best first. A hop whose fee equals the
    ceiling is accepted.
    """

    __slots__ = ("_max_fee_pct",)

    def __init__(self, max_fee_pct: float) -> None:
        """
        Initialize filter.

        Args:
            max_fee_pct: Maximum fee per hop, in percent.
        """
        self._max_fee_pct = max_fee_pct

    @property
    def max_fee_pct(self) -> float:
        """Get the fee ceiling in percent."""
        return self._max_fee_pct

    def is_acceptable(self, route: Route) -> bool:
        """Check that no hop of the route exceeds the ceiling."""
        return all(hop.fee_pct <= self._max_fee_pct for hop in route.hops)

    def select(self, routes: Sequence[Route]) -> Route | None:
        """
        Return the first acceptable route.

        Args:
            routes: Candidate routes ordered best to worst.

        Returns:
            The chosen route, or None when every candidate is rejected.
        """
        for index, route in enumerate(routes):
            if self.is_acceptable(route):
                if index:
                    logger.debug(f"Skipped {index} route(s) above {self._max_fee_pct}% fee")
                return route

        if routes:
            logger.debug(f"All {len(routes)} route(s) exceed {self._max_fee_pct}% fee")
        return None
