"""
Pytest configuration and shared fixtures for the integration stack tests.
"""
import pytest
import warnings
import aws_cdk as cdk
from aws_cdk.assertions import Template
from integ.existing_endpoint_stack import (
    ExistingEndpointIntegConfig,
    ExistingSageMakerEndpointStack,
)

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
def default_config():
    """Create a default integration configuration for testing."""
    return ExistingEndpointIntegConfig()


@pytest.fixture
def test_config():
    """Create a test-specific integration configuration."""
    return ExistingEndpointIntegConfig(
        image="123456789012.dkr.ecr.us-east-1.amazonaws.com/xgboost:latest",
        model_data_url="s3://test-bucket/models/xgboost/model.tar.gz",
        lambda_timeout_minutes=10,
        lambda_memory_size=512,
    )


@pytest.fixture
def stack_with_default_config(app, default_config):
    """Create the integration stack with default configuration."""
    return ExistingSageMakerEndpointStack(app, "TestIntegStack", config=default_config)


@pytest.fixture
def template_from_default_stack(stack_with_default_config):
    """Create a CloudFormation template from the default stack."""
    return Template.from_stack(stack_with_default_config)


@pytest.fixture
def template_from_test_stack(app, test_config):
    """Create a CloudFormation template from the test stack."""
    return Template.from_stack(
        ExistingSageMakerEndpointStack(app, "TestIntegStack", config=test_config)
    )
