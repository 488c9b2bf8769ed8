# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Lambda handler that sends a payload to the SageMaker endpoint named in
SAGEMAKER_ENDPOINT_NAME and returns the prediction.

Event format:
    {"payload": "<csv row>" | {...}, "content_type": "text/csv"}
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from endpoint_metrics import log_event, put_invocation_metric

logger = logging.getLogger()
logger.setLevel(os.environ.get("LOG_LEVEL", "INFO"))

DEFAULT_CONTENT_TYPE = "text/csv"


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Invoke the configured SageMaker endpoint with the event payload.

    Args:
        event: Lambda event containing the payload
        context: Lambda context object

    Returns:
        Dict with success flag and either data or error details
    """
    start_time = datetime.now(timezone.utc)

    endpoint_name = os.environ.get("SAGEMAKER_ENDPOINT_NAME")
    if not endpoint_name:
        put_invocation_metric("ConfigurationError")
        return _error_response(
            "CONFIGURATION_ERROR", "SageMaker endpoint name not configured"
        )

    if not isinstance(event, dict) or event.get("payload") is None:
        put_invocation_metric("ValidationError")
        return _error_response(
            "INVALID_EVENT_STRUCTURE", "Missing required field: payload"
        )

    payload = event["payload"]
    content_type = event.get("content_type", DEFAULT_CONTENT_TYPE)
    body = payload if isinstance(payload, str) else json.dumps(payload)

    log_event(
        "invoke_endpoint_started",
        {
            "request_id": getattr(context, "aws_request_id", None),
            "endpoint_name": endpoint_name,
            "content_type": content_type,
        },
    )

    try:
        client = boto3.client("sagemaker-runtime")
        response = client.invoke_endpoint(
            EndpointName=endpoint_name,
            ContentType=content_type,
            Body=body,
        )
    except ClientError as e:
        error_code = e.response.get("Error", {}).get("Code", "Unknown")
        logger.error(f"SageMaker invocation failed: {e}")
        put_invocation_metric("InvocationError")
        return _error_response(
            "ENDPOINT_INVOCATION_ERROR",
            f"SageMaker endpoint invocation failed: {error_code}",
        )
    except BotoCoreError as e:
        logger.error(f"AWS client error: {e}")
        put_invocation_metric("InvocationError")
        return _error_response("AWS_CLIENT_ERROR", f"AWS client error: {e}")

    try:
        result = response["Body"].read().decode("utf-8")
    except UnicodeDecodeError as e:
        logger.error(f"Endpoint response is not valid UTF-8: {e}")
        put_invocation_metric("InvocationError")
        return _error_response(
            "INVALID_RESPONSE", "SageMaker endpoint returned a non UTF-8 response"
        )

    duration_ms = (datetime.now(timezone.utc) - start_time).total_seconds() * 1000
    put_invocation_metric("Duration", duration_ms, "Milliseconds")
    put_invocation_metric("InvocationSuccess")

    log_event("invoke_endpoint_completed", {"duration_ms": duration_ms})

    return {
        "success": True,
        "data": {
            "endpoint_name": endpoint_name,
            "content_type": response.get("ContentType", content_type),
            "result": result,
        },
    }


def _error_response(error_code: str, message: str) -> Dict[str, Any]:
    return {
        "success": False,
        "error_code": error_code,
        "message": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
