"""
Pytest configuration and shared fixtures for the integration Lambda handler tests.
"""

import sys
from pathlib import Path

# Add the handler directory to Python path
lambda_dir = Path(__file__).parent.parent
sys.path.insert(0, str(lambda_dir))

import pytest
from unittest.mock import Mock


@pytest.fixture
def mock_lambda_context():
    """Mock Lambda context object."""
    context = Mock()
    context.aws_request_id = "test-request-id-123"
    context.function_name = "test-lambda-function"
    context.function_version = "$LATEST"
    context.invoked_function_arn = "arn:aws:lambda:us-east-1:123456789012:function:test-function"
    context.memory_limit_in_mb = 128
    context.remaining_time_in_millis = lambda: 30000
    return context


@pytest.fixture
def mock_environment_variables(monkeypatch):
    """Mock environment variables for testing."""
    monkeypatch.setenv("SAGEMAKER_ENDPOINT_NAME", "test-endpoint")
    monkeypatch.setenv("METRICS_NAMESPACE", "Test/Namespace")
    monkeypatch.setenv("LOG_LEVEL", "INFO")


@pytest.fixture
def aws_credentials(monkeypatch):
    """Fake credentials so boto3 never reaches a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def csv_event():
    """Event carrying a CSV row."""
    return {"payload": "0.5,1.2,3.4,0.0"}


@pytest.fixture
def json_event():
    """Event carrying a JSON document."""
    return {
        "payload": {"instances": [{"features": [0.5, 1.2, 3.4, 0.0]}]},
        "content_type": "application/json",
    }
