"""
CloudWatch metrics publishing for backup runs.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .models import RunMetrics

logger = logging.getLogger(__name__)


def cloudwatch_client(region: Optional[str] = None):
    """Create a CloudWatch client, optionally pinned to a region."""
    if region:
        return boto3.client("cloudwatch", region_name=region)
    return boto3.client("cloudwatch")


def build_metric_data(metrics: RunMetrics, duration_ms: float, success: bool,
                      function_name: str, timestamp: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """
    Build the MetricData payload for put_metric_data.
    
    Args:
        metrics: Run counters
        duration_ms: Run duration in milliseconds
        success: Whether the run completed without a fatal error
        function_name: Value for the FunctionName dimension
        timestamp: Metric timestamp (defaults to now)
        
    Returns:
        List of metric datums
    """
    if timestamp is None:
        timestamp = datetime.now(timezone.utc)

    dimensions = [{"Name": "FunctionName", "Value": function_name}]
    values = [
        ("Duration", duration_ms, "Milliseconds"),
        ("InstancesAttempted", metrics.attempted, "Count"),
        ("InstancesSucceeded", metrics.succeeded, "Count"),
        ("InstancesFailed", metrics.failed, "Count"),
        ("ImagesCreated", metrics.created, "Count"),
        ("ImagesDeleted", metrics.deleted, "Count"),
        ("SnapshotsDeleted", metrics.snapshots_deleted, "Count"),
        ("Success", 1 if success else 0, "Count"),
    ]

    return [
        {
            "MetricName": name,
            "Dimensions": dimensions,
            "Timestamp": timestamp,
            "Value": float(value),
            "Unit": unit,
        }
        for name, value, unit in values
    ]


def publish_metrics(cloudwatch, namespace: str, metrics: RunMetrics, duration_ms: float,
                    success: bool, function_name: str) -> bool:
    """
    Publish run metrics, never raising.
    
    Returns:
        True if the metrics were accepted, False otherwise
    """
    metric_data = build_metric_data(metrics, duration_ms, success, function_name)

    try:
        cloudwatch.put_metric_data(Namespace=namespace, MetricData=metric_data)
    except (ClientError, BotoCoreError) as e:
        logger.error(f"Failed to publish metrics to {namespace}: {e}")
        return False
    except Exception as e:
        logger.exception(f"Unexpected error publishing metrics to {namespace}: {e}")
        return False

    logger.info(f"Published {len(metric_data)} metrics to {namespace}")
    return True
