"""
Unit tests for SLO threshold selection and SLOValidator
"""

from datetime import timedelta

import pytest

from src.models.api_call import APICallMetric, LatencyMetric
from src.monitoring.validator import (
    CLUSTER_THRESHOLD,
    NAMESPACE_THRESHOLD,
    RESOURCE_THRESHOLD,
    SLOValidator,
    get_slo_threshold,
)


def make_metric(verb="GET", scope="resource", perc99=timedelta(0), slow_count=0, resource="pods"):
    return APICallMetric(
        resource=resource,
        subresource="",
        verb=verb,
        scope=scope,
        latency=LatencyMetric(perc99=perc99),
        slow_count=slow_count,
    )


class TestThresholdSelection:
    """Objective is a pure function of (verb, scope)."""

    @pytest.mark.parametrize(
        "verb, scope, expected",
        [
            ("GET", "resource", timedelta(seconds=1)),
            ("GET", "cluster", timedelta(seconds=1)),
            ("POST", "namespace", timedelta(seconds=1)),
            ("DELETE", "", timedelta(seconds=1)),
            ("LIST", "cluster", timedelta(seconds=30)),
            ("LIST", "namespace", timedelta(seconds=5)),
            ("LIST", "resource", timedelta(seconds=5)),
            ("LIST", "", timedelta(seconds=5)),
        ],
    )
    def test_threshold(self, verb, scope, expected):
        assert get_slo_threshold(verb, scope) == expected

    def test_verb_match_is_case_sensitive(self):
        assert get_slo_threshold("list", "cluster") == RESOURCE_THRESHOLD

    def test_constants(self):
        assert RESOURCE_THRESHOLD < NAMESPACE_THRESHOLD < CLUSTER_THRESHOLD


class TestValidate:
    """Test single record validation."""

    def test_get_over_threshold_fails_without_tolerance(self):
        validator = SLOValidator(allowed_slow_calls=0)

        violation = validator.validate(make_metric(perc99=timedelta(seconds=2)))

        assert violation is not None
        assert violation.startswith("got: {Resource: pods")
        assert violation.endswith("expected perc99 <= 1s")

    def test_get_under_threshold_passes(self):
        validator = SLOValidator()

        assert validator.validate(make_metric(perc99=timedelta(milliseconds=500))) is None

    def test_equal_to_threshold_passes(self):
        validator = SLOValidator()

        assert validator.validate(make_metric(verb="LIST", scope="namespace", perc99=timedelta(seconds=5))) is None

    def test_slow_calls_within_tolerance_are_exempt(self):
        validator = SLOValidator(allowed_slow_calls=10)
        metric = make_metric(verb="LIST", scope="cluster", perc99=timedelta(seconds=40), slow_count=5)

        assert validator.validate(metric) is None

    def test_slow_calls_at_tolerance_are_exempt(self):
        validator = SLOValidator(allowed_slow_calls=10)
        metric = make_metric(verb="LIST", scope="cluster", perc99=timedelta(seconds=40), slow_count=10)

        assert validator.validate(metric) is None

    def test_slow_calls_over_tolerance_fail(self):
        validator = SLOValidator(allowed_slow_calls=10)
        metric = make_metric(verb="LIST", scope="cluster", perc99=timedelta(seconds=40), slow_count=15)

        violation = validator.validate(metric)

        assert violation is not None
        assert "expected perc99 <= 30s" in violation

    def test_zero_tolerance_never_exempts(self):
        """slow_count 0 <= 0 is not an exemption when no slow calls are allowed."""
        validator = SLOValidator(allowed_slow_calls=0)
        metric = make_metric(verb="LIST", scope="cluster", perc99=timedelta(seconds=40), slow_count=0)

        assert validator.validate(metric) is not None


class TestValidateAll:
    """Test that validation covers every record."""

    def test_collects_all_failures_in_order(self):
        validator = SLOValidator()
        metrics = [
            make_metric(resource="a", perc99=timedelta(seconds=3)),
            make_metric(resource="b", perc99=timedelta(milliseconds=10)),
            make_metric(resource="c", perc99=timedelta(seconds=2)),
        ]

        failures = validator.validate_all(metrics)

        assert [key.resource for key in failures] == ["a", "c"]
        assert len(validator.violation_list(failures)) == 2

    def test_no_failures(self):
        validator = SLOValidator()

        assert validator.validate_all([make_metric()]) == {}
        assert validator.validate_all([]) == {}
