# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
CloudWatch metrics and structured logging for the endpoint test function.
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "SageMaker/LambdaEndpointInteg"

_cloudwatch_client = None


def get_cloudwatch_client():
    """Get CloudWatch client (lazy initialization)."""
    global _cloudwatch_client
    if _cloudwatch_client is None:
        _cloudwatch_client = boto3.client("cloudwatch")
    return _cloudwatch_client


def put_invocation_metric(metric_name: str, value: float = 1, unit: str = "Count") -> None:
    """
    Publish one datapoint for the configured endpoint.

    Metric publishing never fails the invocation, errors are logged.
    """
    try:
        get_cloudwatch_client().put_metric_data(
            Namespace=os.environ.get("METRICS_NAMESPACE", DEFAULT_NAMESPACE),
            MetricData=[
                {
                    "MetricName": metric_name,
                    "Value": value,
                    "Unit": unit,
                    "Dimensions": [
                        {
                            "Name": "EndpointName",
                            "Value": os.environ.get("SAGEMAKER_ENDPOINT_NAME", "unknown"),
                        }
                    ],
                }
            ],
        )
    except (BotoCoreError, ClientError) as e:
        logger.warning(f"Failed to put metric {metric_name}: {e}")


def log_event(event_type: str, data: Dict[str, Any]) -> None:
    log_entry = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event_type": event_type,
        "data": data,
    }
    logger.info(json.dumps(log_entry, default=str))
