"""
Pytest configuration and shared fixtures for sagemaker_helpers tests.
"""
import pytest
import warnings
import aws_cdk as cdk
from aws_cdk import aws_iam as iam

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
    """Create an empty stack to build resources into."""
    return cdk.Stack(app, "TestStack")


@pytest.fixture
def sagemaker_role(stack):
    """Create a role assumed by SageMaker."""
    return iam.Role(
        stack,
        "SagemakerRole",
        assumed_by=iam.ServicePrincipal("sagemaker.amazonaws.com"),
    )


@pytest.fixture
def model_props(sagemaker_role):
    """Model props with the minimum required fields."""
    return {
        "execution_role_arn": sagemaker_role.role_arn,
        "primary_container": {
            "image": "123456789012.dkr.ecr.us-east-1.amazonaws.com/linear-learner:latest",
            "model_data_url": "s3://test-bucket/models/model.tar.gz",
        },
    }
