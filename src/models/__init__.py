"""
Data models package
"""

from .api_call import APICallKey, APICallMetric, LatencyMetric
from .perf_data import DataItem, PerfData, Summary
from .sample import Sample

__all__ = [
    "Sample",
    "APICallKey",
    "APICallMetric",
    "LatencyMetric",
    "DataItem",
    "PerfData",
    "Summary",
]
