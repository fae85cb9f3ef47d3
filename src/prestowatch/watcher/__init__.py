"""The poll, classify, dedupe and alert pipeline."""

from prestowatch.watcher.alerting import PartitionAlertBuilder
from prestowatch.watcher.annotations import ReportingMetadata, has_opt_out, parse_reporting_metadata
from prestowatch.watcher.classifier import ClassificationResult, ClassificationStatus, PartitionClassifier
from prestowatch.watcher.collector import Collector

__all__ = [
    "ClassificationResult",
    "ClassificationStatus",
    "Collector",
    "PartitionAlertBuilder",
    "PartitionClassifier",
    "ReportingMetadata",
    "has_opt_out",
    "parse_reporting_metadata",
]
