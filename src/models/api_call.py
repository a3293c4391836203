"""
API call aggregate record: key, latency distribution and counters.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import NamedTuple, Optional


class APICallKey(NamedTuple):
    """Identity of an aggregate record."""

    resource: str
    subresource: str
    verb: str
    scope: str


def format_duration(value: timedelta) -> str:
    """Render a duration compactly, e.g. ``500ms`` or ``1.5s``."""
    seconds = value.total_seconds()
    if seconds == 0:
        return "0s"
    if abs(seconds) < 1:
        return f"{seconds * 1000:g}ms"
    return f"{seconds:g}s"


@dataclass(slots=True)
class LatencyMetric:
    """
    50th, 90th and 99th percentile latency.

    Fields are filled independently while samples are merged, so a partially
    populated distribution is normal during a gather pass.
    """

    perc50: timedelta = field(default_factory=timedelta)
    perc90: timedelta = field(default_factory=timedelta)
    perc99: timedelta = field(default_factory=timedelta)

    def set_quantile(self, quantile: float, latency: timedelta) -> None:
        """Set the percentile matching ``quantile``; other quantiles are ignored."""
        if quantile == 0.5:
            self.perc50 = latency
        elif quantile == 0.9:
            self.perc90 = latency
        elif quantile == 0.99:
            self.perc99 = latency

    def verify_threshold(self, threshold: timedelta) -> Optional[str]:
        """
        Check the 99th percentile against a threshold.

        Returns:
            Breach description if perc99 exceeds threshold, None otherwise
        """
        if self.perc99 > threshold:
            return (
                f"too high latency 99th percentile: got {format_duration(self.perc99)} "
                f"expected: {format_duration(threshold)}"
            )
        return None

    def __str__(self) -> str:
        return (
            f"perc50: {format_duration(self.perc50)}, "
            f"perc90: {format_duration(self.perc90)}, "
            f"perc99: {format_duration(self.perc99)}"
        )


@dataclass
class APICallMetric:
    """
    Aggregate record for one (resource, subresource, verb, scope) dimension.

    Attributes:
        resource: API resource (e.g. 'pods')
        subresource: Subresource, empty for the main resource
        verb: Request verb (e.g. 'GET', 'LIST')
        scope: Request scope ('resource', 'namespace' or 'cluster')
        latency: Percentile latencies
        count: Number of requests over the measurement window
        slow_count: Number of requests slower than the objective bucket
    """

    resource: str
    subresource: str
    verb: str
    scope: str
    latency: LatencyMetric = field(default_factory=LatencyMetric)
    count: int = 0
    slow_count: int = 0

    @classmethod
    def from_key(cls, key: APICallKey) -> "APICallMetric":
        return cls(
            resource=key.resource,
            subresource=key.subresource,
            verb=key.verb,
            scope=key.scope,
        )

    @property
    def key(self) -> APICallKey:
        return APICallKey(self.resource, self.subresource, self.verb, self.scope)

    def __str__(self) -> str:
        return (
            f"{{Resource: {self.resource} Subresource: {self.subresource} "
            f"Verb: {self.verb} Scope: {self.scope} Latency: {{{self.latency}}} "
            f"Count: {self.count} SlowCount: {self.slow_count}}}"
        )
