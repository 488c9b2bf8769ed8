"""
Pytest configuration and shared fixtures for LambdaToSageMakerEndpoint tests.
"""
import pytest
import warnings
import aws_cdk as cdk
from aws_cdk import aws_lambda as _lambda, aws_sagemaker as sagemaker

# Suppress warnings at the module level
warnings.filterwarnings("ignore", category=DeprecationWarning)
warnings.filterwarnings("ignore", category=PendingDeprecationWarning)
warnings.filterwarnings("ignore", category=UserWarning)
warnings.filterwarnings("ignore", category=FutureWarning)
warnings.filterwarnings("ignore", category=ResourceWarning)

# Suppress specific AWS/CDK warnings
warnings.filterwarnings("ignore", message=".*deprecated.*")
warnings.filterwarnings("ignore", message=".*jsii.*")
warnings.filterwarnings("ignore", message=".*constructs.*")
warnings.filterwarnings("ignore", message=".*CDK.*")


@pytest.fixture(autouse=True)
def suppress_warnings():
    """Automatically suppress warnings for all tests."""
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        yield


@pytest.fixture
def app():
    """Create a CDK app for testing."""
    return cdk.App()


@pytest.fixture
def stack(app):
    """Create an empty stack to host the construct."""
    return cdk.Stack(app, "TestStack")


@pytest.fixture
def lambda_function_props():
    """Minimal inline Lambda function props."""
    return {
        "runtime": _lambda.Runtime.PYTHON_3_13,
        "handler": "index.handler",
        "code": _lambda.Code.from_inline("def handler(event, context):\n    return event\n"),
    }


@pytest.fixture
def model_props():
    """Model props without an execution role, the construct supplies one."""
    return {
        "primary_container": {
            "image": "123456789012.dkr.ecr.us-east-1.amazonaws.com/linear-learner:latest",
            "model_data_url": "s3://test-bucket/models/model.tar.gz",
        },
    }


@pytest.fixture
def existing_endpoint(stack):
    """An endpoint defined outside the construct."""
    return sagemaker.CfnEndpoint(
        stack, "ExistingEndpoint", endpoint_config_name="existing-config"
    )
