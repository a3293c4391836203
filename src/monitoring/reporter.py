"""
Ranking, diagnostic output and rendering of API call records.
"""

import logging
from datetime import timedelta
from typing import Callable, Dict, Iterable, List

from src.models.api_call import APICallKey, APICallMetric, format_duration
from src.models.perf_data import DataItem, PerfData, Summary

logger = logging.getLogger(__name__)

CURRENT_API_CALL_METRICS_VERSION = "v1"

# Number of highest-latency metrics to print. Failing metrics are printed
# regardless of rank.
TOP_TO_PRINT = 5

_MILLISECOND = timedelta(milliseconds=1)


def rank(metrics: Iterable[APICallMetric]) -> List[APICallMetric]:
    """Order records by descending 99th percentile latency."""
    return sorted(metrics, key=lambda m: m.latency.perc99, reverse=True)


def to_milliseconds(value: timedelta) -> float:
    return value / _MILLISECOND


class Reporter:
    """
    Emits diagnostics for the worst records and renders the report.

    Args:
        identifier: Measurement identifier prefixed to every diagnostic line
        top_to_print: Number of top-ranked records always printed
    """

    def __init__(self, identifier: str, top_to_print: int = TOP_TO_PRINT):
        self.identifier = identifier
        self.top_to_print = top_to_print

    def log_top_metrics(
        self,
        ranked: List[APICallMetric],
        failures: Dict[APICallKey, str],
        threshold_of: Callable[[APICallMetric], timedelta],
    ) -> int:
        """
        Log the top records plus every failing record.

        Returns:
            Number of lines logged
        """
        top = self.top_to_print
        printed = 0
        for metric in ranked:
            failed = metric.key in failures
            if top > 0 or failed:
                top -= 1
                prefix = "WARNING " if failed else ""
                logger.info(
                    f"{self.identifier}: {prefix}Top latency metric: {metric}; "
                    f"threshold: {format_duration(threshold_of(metric))}"
                )
                printed += 1
        return printed

    @staticmethod
    def to_perf_data(ranked: List[APICallMetric]) -> PerfData:
        perf_data = PerfData(version=CURRENT_API_CALL_METRICS_VERSION)
        for metric in ranked:
            perf_data.data_items.append(
                DataItem(
                    data={
                        "Perc50": to_milliseconds(metric.latency.perc50),
                        "Perc90": to_milliseconds(metric.latency.perc90),
                        "Perc99": to_milliseconds(metric.latency.perc99),
                    },
                    unit="ms",
                    labels={
                        "Verb": metric.verb,
                        "Resource": metric.resource,
                        "Subresource": metric.subresource,
                        "Scope": metric.scope,
                        "Count": str(metric.count),
                        "SlowCount": str(metric.slow_count),
                    },
                )
            )
        return perf_data

    def render(self, summary_name: str, ranked: List[APICallMetric]) -> Summary:
        return Summary(name=summary_name, ext="json", content=self.to_perf_data(ranked).to_json())
