"""
PromQL query construction for API call latency and request counts.

Two latency strategies are supported:
- Windowed (default): 99th percentile over rolling 5m windows, matching the
  API call latency SLI definition.
- Simple: histogram_quantile over the whole measurement window, one query per
  quantile. Doesn't match the SLI but is usable in short tests where there
  are not enough 5m windows.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import List, Optional

# Excluded from all latency and count queries
DEFAULT_FILTERS = 'resource!="events", verb!~"WATCH|WATCHLIST|PROXY|CONNECT"'

# Placeholders: (1) filters, (2) query window
LATENCY_QUERY = (
    "quantile_over_time(0.99, "
    "apiserver:apiserver_request_latency_1m:histogram_quantile{{{filters}}}[{window}])"
)

# Placeholders: (1) quantile, (2) filters, (3) query window
SIMPLE_LATENCY_QUERY = (
    "histogram_quantile({quantile:.2f}, "
    "sum(rate(apiserver_request_duration_seconds_bucket{{{filters}}}[{window}])) "
    "by (resource,  subresource, verb, scope, le))"
)

COUNT_QUERY = (
    "sum(increase(apiserver_request_duration_seconds_count{{{filters}}}[{window}])) "
    "by (resource, subresource, scope, verb)"
)

COUNT_SLOW_QUERY = (
    "sum(rate(apiserver_request_duration_seconds_bucket{{{filters}}}[{window}])) "
    "by (resource, subresource, scope, verb)"
)

# Excludes all buckets of 1s and shorter
FILTER_GET_AND_MUTATING = r'verb!~"WATCH|WATCHLIST|PROXY|CONNECT", le!~"0.\\d+|1"'
# Excludes all buckets below or equal 5s
FILTER_NAMESPACE_LIST = r'scope!="cluster", verb="LIST", le!~"[01234](.\\d+)?|5"'
# Excludes all buckets below or equal 30s
FILTER_CLUSTER_LIST = r'scope="cluster", verb="LIST", le!~"[12]?[0-9](.\\d+)?|30"'

SLOW_CALL_FILTERS = [FILTER_GET_AND_MUTATING, FILTER_NAMESPACE_LIST, FILTER_CLUSTER_LIST]

SIMPLE_QUANTILES = [0.5, 0.9, 0.99]

LATENCY_WINDOW_SIZE = timedelta(minutes=5)
MIN_LATENCY_WINDOW = timedelta(minutes=1)


def to_prometheus_time(duration: timedelta) -> str:
    """Render duration as whole seconds, e.g. ``3600s``."""
    return f"{int(duration.total_seconds())}s"


def format_quantile(quantile: float) -> str:
    return f"{quantile:.2f}"


@dataclass(frozen=True)
class LatencyQuery:
    """
    Latency query text plus the quantile it computes.

    ``quantile`` is set only for simple queries, whose results carry no
    quantile label of their own.
    """

    text: str
    quantile: Optional[float] = None


class QueryBuilder:
    """Builds latency, count and slow-count queries for one measurement window."""

    def __init__(self, filters: str = DEFAULT_FILTERS):
        self.filters = filters

    @staticmethod
    def latency_window(measurement_duration: timedelta) -> timedelta:
        """
        Window for the windowed latency query.

        The SLI aggregates over 5m windows, so the first 5 minutes of the test
        are skipped. Floored at 1 minute so short tests still get a window.
        """
        window = measurement_duration - LATENCY_WINDOW_SIZE
        if window < MIN_LATENCY_WINDOW:
            window = MIN_LATENCY_WINDOW
        return window

    def windowed_latency_query(self, measurement_duration: timedelta) -> LatencyQuery:
        window = to_prometheus_time(self.latency_window(measurement_duration))
        return LatencyQuery(LATENCY_QUERY.format(filters=self.filters, window=window))

    def simple_latency_queries(self, measurement_duration: timedelta) -> List[LatencyQuery]:
        window = to_prometheus_time(measurement_duration)
        return [
            LatencyQuery(
                SIMPLE_LATENCY_QUERY.format(quantile=q, filters=self.filters, window=window),
                quantile=q,
            )
            for q in SIMPLE_QUANTILES
        ]

    def latency_queries(
        self, measurement_duration: timedelta, use_simple: bool = False
    ) -> List[LatencyQuery]:
        if use_simple:
            return self.simple_latency_queries(measurement_duration)
        return [self.windowed_latency_query(measurement_duration)]

    def count_query(self, measurement_duration: timedelta) -> str:
        return COUNT_QUERY.format(
            filters=self.filters, window=to_prometheus_time(measurement_duration)
        )

    def slow_count_queries(
        self, measurement_duration: timedelta, allowed_slow_calls: int
    ) -> List[str]:
        """
        Slow-call count queries, one per objective category.

        Nothing is built when slow calls are not tolerated.
        """
        if allowed_slow_calls == 0:
            return []
        window = to_prometheus_time(measurement_duration)
        return [COUNT_SLOW_QUERY.format(filters=f, window=window) for f in SLOW_CALL_FILTERS]
