"""
API call latency objective selection and validation.

Thresholds follow the official Kubernetes API call latency SLO:
https://github.com/kubernetes/community/blob/master/sig-scalability/slos/api_call_latency.md
"""

import logging
from datetime import timedelta
from typing import Dict, Iterable, List, Optional

from src.models.api_call import APICallKey, APICallMetric, format_duration

logger = logging.getLogger(__name__)

RESOURCE_THRESHOLD = timedelta(seconds=1)
NAMESPACE_THRESHOLD = timedelta(seconds=5)
CLUSTER_THRESHOLD = timedelta(seconds=30)


def get_slo_threshold(verb: str, scope: str) -> timedelta:
    """
    Objective for a (verb, scope) dimension.

    Non-LIST calls are single-object calls; LIST calls are judged by scope.
    """
    if verb != "LIST":
        return RESOURCE_THRESHOLD
    if scope == "cluster":
        return CLUSTER_THRESHOLD
    return NAMESPACE_THRESHOLD


class SLOValidator:
    """
    Checks API call records against their latency objective.

    Args:
        allowed_slow_calls: When > 0, a record whose slow count does not
            exceed this value passes even if its 99th percentile is too high.
    """

    def __init__(self, allowed_slow_calls: int = 0):
        self.allowed_slow_calls = allowed_slow_calls

    def threshold(self, metric: APICallMetric) -> timedelta:
        return get_slo_threshold(metric.verb, metric.scope)

    def validate(self, metric: APICallMetric) -> Optional[str]:
        """
        Validate one record.

        Returns:
            Violation description if the record fails, None otherwise
        """
        threshold = self.threshold(metric)
        if metric.latency.verify_threshold(threshold) is None:
            return None
        if self.allowed_slow_calls > 0 and metric.slow_count <= self.allowed_slow_calls:
            logger.debug(
                f"Exempting {metric.key}: {metric.slow_count} slow calls "
                f"<= {self.allowed_slow_calls} allowed"
            )
            return None
        return f"got: {metric}; expected perc99 <= {format_duration(threshold)}"

    def validate_all(self, metrics: Iterable[APICallMetric]) -> Dict[APICallKey, str]:
        """
        Validate every record without stopping at the first failure.

        Returns:
            Violation descriptions keyed by record, in input order
        """
        failures: Dict[APICallKey, str] = {}
        for metric in metrics:
            violation = self.validate(metric)
            if violation is not None:
                failures[metric.key] = violation
        return failures

    @staticmethod
    def violation_list(failures: Dict[APICallKey, str]) -> List[str]:
        return list(failures.values())
