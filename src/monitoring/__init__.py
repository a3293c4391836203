"""
API call latency measurement and SLO validation.

This package turns monitoring backend samples into per-dimension API call
records and checks them against the API call latency SLO.

Usage:
    from src.config import MeasurementConfig
    from src.monitoring import APIResponsivenessGatherer

    gatherer = APIResponsivenessGatherer()
    result = gatherer.gather(executor, start_time, MeasurementConfig())
    print(result.summary.content)
    if result.violation:
        print(result.violation)
"""

from .aggregator import APICallMetricsAggregator
from .collector import QueryExecutor, SampleCollector
from .gatherer import APIResponsivenessGatherer, GatherResult
from .queries import LatencyQuery, QueryBuilder
from .replay_executor import ReplayQueryExecutor, ReplayResponse
from .reporter import Reporter, rank
from .validator import SLOValidator, get_slo_threshold

__all__ = [
    "APIResponsivenessGatherer",
    "GatherResult",
    "QueryBuilder",
    "LatencyQuery",
    "QueryExecutor",
    "SampleCollector",
    "APICallMetricsAggregator",
    "SLOValidator",
    "get_slo_threshold",
    "Reporter",
    "rank",
    "ReplayQueryExecutor",
    "ReplayResponse",
]
