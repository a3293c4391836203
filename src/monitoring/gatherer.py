"""
API responsiveness measurement: one gather-and-validate pass.

Pipeline: QueryBuilder -> SampleCollector -> APICallMetricsAggregator ->
SLOValidator -> Reporter.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional

from src.config.measurement_config import MEASUREMENT_NAME, MeasurementConfig
from src.core.exceptions import MetricViolationError
from src.models.api_call import APICallMetric
from src.models.perf_data import Summary
from src.monitoring.aggregator import APICallMetricsAggregator
from src.monitoring.collector import QueryExecutor, SampleCollector
from src.monitoring.queries import QueryBuilder
from src.monitoring.reporter import Reporter, rank
from src.monitoring.validator import SLOValidator

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class GatherResult:
    """
    Outcome of a gather pass.

    Attributes:
        summary: Rendered report
        metrics: Records ordered by descending 99th percentile
        violation: Aggregated objective violation, None when all records pass
    """

    summary: Summary
    metrics: List[APICallMetric] = field(default_factory=list)
    violation: Optional[MetricViolationError] = None

    @property
    def passed(self) -> bool:
        return self.violation is None


class APIResponsivenessGatherer:
    """
    Gathers API call latency from the monitoring backend and checks the SLO.

    Args:
        clock: Returns the evaluation instant; defaults to current UTC time
        query_builder: Query construction strategy
    """

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        query_builder: Optional[QueryBuilder] = None,
    ):
        self._clock = clock or utc_now
        self._query_builder = query_builder or QueryBuilder()

    def __str__(self) -> str:
        return MEASUREMENT_NAME

    def is_enabled(self, config: MeasurementConfig) -> bool:
        return True

    def gather(
        self, executor: QueryExecutor, start_time: datetime, config: MeasurementConfig
    ) -> GatherResult:
        """
        Run one gather-and-validate pass.

        Args:
            executor: Query-executing backend
            start_time: Start of the measured period
            config: Measurement configuration

        Returns:
            GatherResult carrying the report and the violation, if any

        Raises:
            ConfigurationError: If params are invalid (before any query runs)
            QueryExecutionError: If any query fails
            MalformedSampleError: If a latency sample has no numeric quantile
        """
        params = config.parse_params()
        summary_name = params.summary_name or str(self)

        aggregator = self._gather_api_calls(
            executor, start_time, params.use_simple_latency_query, params.allowed_slow_calls
        )

        ranked = rank(aggregator.metrics())
        validator = SLOValidator(params.allowed_slow_calls)
        failures = validator.validate_all(ranked)

        reporter = Reporter(config.identifier)
        reporter.log_top_metrics(ranked, failures, validator.threshold)
        summary = reporter.render(summary_name, ranked)

        violation = None
        violations = validator.violation_list(failures)
        if violations:
            violation = MetricViolationError(
                "top latency metric",
                f"there should be no high-latency requests, but: {violations}",
                violations,
            )
            logger.warning(f"{config.identifier}: {len(violations)} API call(s) violate the latency SLO")

        return GatherResult(summary=summary, metrics=ranked, violation=violation)

    def _gather_api_calls(
        self,
        executor: QueryExecutor,
        start_time: datetime,
        use_simple: bool,
        allowed_slow_calls: int,
    ) -> APICallMetricsAggregator:
        measurement_end = self._clock()
        measurement_duration = measurement_end - start_time
        collector = SampleCollector(executor, measurement_end)
        builder = self._query_builder

        logger.info(
            f"Gathering API call metrics for {measurement_duration} "
            f"(simple latency query: {use_simple}, allowed slow calls: {allowed_slow_calls})"
        )

        latency_samples = collector.collect_latency(
            builder.latency_queries(measurement_duration, use_simple)
        )
        count_samples = collector.collect(builder.count_query(measurement_duration))
        slow_count_samples = collector.collect_all(
            builder.slow_count_queries(measurement_duration, allowed_slow_calls)
        )

        aggregator = APICallMetricsAggregator.from_samples(
            latency_samples, count_samples, slow_count_samples
        )
        logger.info(
            f"Aggregated {len(aggregator)} API call metrics from "
            f"{len(latency_samples)} latency, {len(count_samples)} count and "
            f"{len(slow_count_samples)} slow-count samples"
        )
        return aggregator
