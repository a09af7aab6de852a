"""
Prometheus metrics for the anonymization engine.

Metrics are module-level so every serializer and migration in the process
reports into the same series.
"""

import logging
from typing import Callable, TypeVar

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram

logger = logging.getLogger(__name__)

T = TypeVar("T")


def get_or_create_metric(
    metric_factory: Callable[[], T],
    metric_name: str,
    registry: CollectorRegistry = REGISTRY,
) -> T:
    """
    Create a metric or return the one already registered under metric_name.

    Args:
        metric_factory: Callable that creates the metric
        metric_name: Name used to find an existing collector
        registry: Prometheus registry to use (default: global REGISTRY)

    Returns:
        The metric instance
    """
    try:
        return metric_factory()
    except ValueError:
        # prometheus_client registers counters under several sample names
        collector = registry._names_to_collectors.get(metric_name)
        if collector is None:
            collector = registry._names_to_collectors.get(f"{metric_name}_total")
        if collector is None:
            raise
        logger.debug(f"Reusing already registered metric {metric_name}")
        return collector


FIELDS_ANONYMIZED = get_or_create_metric(
    lambda: Counter(
        "anonymization_fields_anonymized_total",
        "Total field values replaced by an anonymizer",
        ["anonymizer", "kind"],
    ),
    "anonymization_fields_anonymized_total",
)

ANONYMIZER_ERRORS = get_or_create_metric(
    lambda: Counter(
        "anonymization_anonymizer_errors_total",
        "Anonymizer failures during serialization",
        ["anonymizer", "error_type"],
    ),
    "anonymization_anonymizer_errors_total",
)

RECORDS_SERIALIZED = get_or_create_metric(
    lambda: Counter(
        "anonymization_records_serialized_total",
        "Records emitted by the anonymizing serializer",
        ["kind", "previously_anonymized"],
    ),
    "anonymization_records_serialized_total",
)

SERIALIZATION_TIME = get_or_create_metric(
    lambda: Histogram(
        "anonymization_serialization_seconds",
        "Time to serialize and anonymize one record",
        ["kind"],
        buckets=[0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1],
    ),
    "anonymization_serialization_seconds",
)

LEGACY_ENTRIES = get_or_create_metric(
    lambda: Counter(
        "anonymization_legacy_entries_total",
        "Legacy registry entries processed by migration",
        ["outcome"],
    ),
    "anonymization_legacy_entries_total",
)
