"""
Aggregation of latency, count and slow-count samples into API call records.

Samples from independent queries are merged by (resource, subresource, verb,
scope). Records are created lazily on first reference and are only ever
updated field by field, so the result does not depend on the order in which
the three sample sets are applied.
"""

import logging
import math
from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional

from src.core.exceptions import MalformedSampleError
from src.models.api_call import APICallKey, APICallMetric
from src.models.sample import Sample

logger = logging.getLogger(__name__)


def extract_key(sample: Sample) -> APICallKey:
    """Build the aggregate key from a sample's labels."""
    return APICallKey(
        resource=sample.label("resource"),
        subresource=sample.label("subresource"),
        verb=sample.label("verb"),
        scope=sample.label("scope"),
    )


def round_count(value: float) -> int:
    """Round half away from zero; non-finite values count as zero."""
    if not math.isfinite(value):
        return 0
    return int(Decimal(repr(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


class APICallMetricsAggregator:
    """
    Keyed mapping of API call records for a single gather pass.

    Not shared between passes: every pass creates its own instance.

    Zero suppression: a count or slow count that rounds to zero neither
    creates a record nor overwrites a previously recorded nonzero value. A
    partial backend response can therefore under-report without detection.
    """

    def __init__(self):
        self._metrics: Dict[APICallKey, APICallMetric] = {}

    @classmethod
    def from_samples(
        cls,
        latency_samples: Iterable[Sample],
        count_samples: Iterable[Sample],
        slow_count_samples: Iterable[Sample],
    ) -> "APICallMetricsAggregator":
        aggregator = cls()
        aggregator.add_latency_samples(latency_samples)
        aggregator.add_count_samples(count_samples)
        aggregator.add_slow_count_samples(slow_count_samples)
        return aggregator

    def _get_or_create(self, key: APICallKey) -> APICallMetric:
        metric = self._metrics.get(key)
        if metric is None:
            metric = APICallMetric.from_key(key)
            self._metrics[key] = metric
        return metric

    def set_latency(self, key: APICallKey, quantile: float, latency: timedelta) -> None:
        self._get_or_create(key).latency.set_quantile(quantile, latency)

    def set_count(self, key: APICallKey, count: int) -> None:
        if count == 0:
            return
        self._get_or_create(key).count = count

    def set_slow_count(self, key: APICallKey, count: int) -> None:
        if count == 0:
            return
        self._get_or_create(key).slow_count = count

    def add_latency_samples(self, samples: Iterable[Sample]) -> None:
        """
        Apply latency samples.

        Raises:
            MalformedSampleError: If a sample's quantile label is not a number
        """
        for sample in samples:
            key = extract_key(sample)
            raw_quantile = sample.label("quantile")
            try:
                quantile = float(raw_quantile)
            except ValueError as e:
                raise MalformedSampleError(
                    f"cannot parse quantile {raw_quantile!r} of sample {sample.metric}"
                ) from e

            # The key is referenced even when its value is unusable
            self._get_or_create(key)

            if not math.isfinite(sample.value):
                logger.warning(
                    f"Skipping non-finite latency {sample.value} for {key} "
                    f"(quantile {raw_quantile})"
                )
                continue

            try:
                latency = timedelta(seconds=sample.value)
            except OverflowError:
                logger.warning(
                    f"Skipping out-of-range latency {sample.value} for {key} "
                    f"(quantile {raw_quantile})"
                )
                continue

            self.set_latency(key, quantile, latency)

    def add_count_samples(self, samples: Iterable[Sample]) -> None:
        for sample in samples:
            self.set_count(extract_key(sample), round_count(sample.value))

    def add_slow_count_samples(self, samples: Iterable[Sample]) -> None:
        for sample in samples:
            self.set_slow_count(extract_key(sample), round_count(sample.value))

    def get(self, key: APICallKey) -> Optional[APICallMetric]:
        return self._metrics.get(key)

    def metrics(self) -> List[APICallMetric]:
        """All records in first-seen order."""
        return list(self._metrics.values())

    def __len__(self) -> int:
        return len(self._metrics)

    def __contains__(self, key: APICallKey) -> bool:
        return key in self._metrics
