"""
Unit tests for the existing-endpoint integration stack.
"""
import aws_cdk as cdk
from aws_cdk.assertions import Template, Match
from integ.existing_endpoint_stack import (
    METRICS_NAMESPACE,
    ExistingSageMakerEndpointStack,
)


class TestStackBasics:
    """Test basic stack functionality."""

    def test_stack_synthesizes_without_errors(self, template_from_default_stack):
        """Test that the stack synthesizes without errors."""
        assert template_from_default_stack is not None

    def test_stack_description(self, template_from_default_stack):
        """Test the template description."""
        template = template_from_default_stack.to_json()

        assert template["Description"] == "Integration Test for aws-lambda-sagemakerendpoint"

    def test_required_resources_are_created(self, template_from_default_stack):
        """Test that the endpoint is built once and reused by the construct."""
        template = template_from_default_stack

        template.resource_count_is("AWS::SageMaker::Model", 1)
        template.resource_count_is("AWS::SageMaker::EndpointConfig", 1)
        template.resource_count_is("AWS::SageMaker::Endpoint", 1)
        template.resource_count_is("AWS::KMS::Key", 1)
        template.resource_count_is("AWS::Lambda::Function", 1)
        template.resource_count_is("AWS::IAM::Role", 2)  # SageMaker + Lambda roles
        template.resource_count_is("AWS::EC2::VPC", 0)

    def test_construct_reuses_stack_endpoint(self, stack_with_default_config):
        """Test that the construct received the endpoint built by the stack."""
        stack = stack_with_default_config

        assert stack.lambda_to_endpoint.sagemaker_endpoint is stack.sagemaker_endpoint
        assert stack.lambda_to_endpoint.sagemaker_role is None


class TestSageMakerResources:
    """Test the SageMaker resources and their role."""

    def test_model_uses_configured_container(self, template_from_test_stack):
        """Test that the configured image and artifacts reach the model."""
        template_from_test_stack.has_resource_properties("AWS::SageMaker::Model", {
            "PrimaryContainer": {
                "Image": "123456789012.dkr.ecr.us-east-1.amazonaws.com/xgboost:latest",
                "ModelDataUrl": "s3://test-bucket/models/xgboost/model.tar.gz",
            }
        })

    def test_sagemaker_role_has_managed_policy(self, template_from_default_stack):
        """Test that the SageMaker role carries AmazonSageMakerFullAccess."""
        template_from_default_stack.has_resource_properties("AWS::IAM::Role", {
            "AssumeRolePolicyDocument": {
                "Statement": [
                    Match.object_like({
                        "Principal": {"Service": "sagemaker.amazonaws.com"}
                    })
                ]
            },
            "ManagedPolicyArns": [
                {
                    "Fn::Join": [
                        "",
                        [
                            "arn:",
                            {"Ref": "AWS::Partition"},
                            ":iam::aws:policy/AmazonSageMakerFullAccess",
                        ],
                    ]
                }
            ],
        })

    def test_endpoint_depends_on_config(self, stack_with_default_config):
        """Test the CloudFormation dependency between endpoint and config."""
        stack = stack_with_default_config
        resources = Template.from_stack(stack).to_json()["Resources"]

        endpoint_id = stack.get_logical_id(stack.sagemaker_endpoint)
        config_id = stack.get_logical_id(stack.sagemaker_endpoint_config)

        assert config_id in resources[endpoint_id]["DependsOn"]


class TestLambdaFunction:
    """Test the Lambda function wired to the endpoint."""

    def test_function_configuration(self, template_from_default_stack):
        """Test runtime, handler, timeout and memory defaults."""
        template_from_default_stack.has_resource_properties("AWS::Lambda::Function", {
            "Runtime": "python3.13",
            "Handler": "index.handler",
            "Timeout": 300,
            "MemorySize": 128,
            "TracingConfig": {"Mode": "Active"},
        })

    def test_function_configuration_from_config(self, template_from_test_stack):
        """Test that timeout and memory follow the configuration."""
        template_from_test_stack.has_resource_properties("AWS::Lambda::Function", {
            "Timeout": 600,
            "MemorySize": 512,
        })

    def test_function_environment(self, stack_with_default_config):
        """Test the environment passed to the handler."""
        stack = stack_with_default_config
        template = Template.from_stack(stack)

        endpoint_id = stack.get_logical_id(stack.sagemaker_endpoint)
        template.has_resource_properties("AWS::Lambda::Function", {
            "Environment": {
                "Variables": {
                    "LOG_LEVEL": "INFO",
                    "METRICS_NAMESPACE": METRICS_NAMESPACE,
                    "SAGEMAKER_ENDPOINT_NAME": {"Fn::GetAtt": [endpoint_id, "EndpointName"]},
                }
            }
        })

    def test_function_permissions(self, stack_with_default_config):
        """Test invoke and metric permissions of the function role."""
        stack = stack_with_default_config
        template = Template.from_stack(stack)

        endpoint_id = stack.get_logical_id(stack.sagemaker_endpoint)
        template.has_resource_properties("AWS::IAM::Policy", {
            "PolicyDocument": {
                "Statement": Match.array_with([
                    {
                        "Action": "sagemaker:InvokeEndpoint",
                        "Effect": "Allow",
                        "Resource": {"Ref": endpoint_id},
                    },
                    {
                        "Action": "cloudwatch:PutMetricData",
                        "Condition": {
                            "StringEquals": {"cloudwatch:namespace": METRICS_NAMESPACE}
                        },
                        "Effect": "Allow",
                        "Resource": "*",
                    },
                ])
            }
        })


class TestOutputs:
    """Test stack outputs."""

    def test_outputs_exist(self, template_from_default_stack):
        """Test that endpoint, function and role outputs are exported."""
        outputs = template_from_default_stack.find_outputs("*")

        assert "EndpointName" in outputs
        assert "LambdaFunctionArn" in outputs
        assert "SageMakerRoleArn" in outputs

    def test_stack_with_environment(self):
        """Test that the stack synthesizes with an explicit environment."""
        app = cdk.App()
        stack = ExistingSageMakerEndpointStack(
            app,
            "TestIntegStack",
            env=cdk.Environment(account="123456789012", region="us-east-1"),
        )
        template = Template.from_stack(stack)

        template.resource_count_is("AWS::SageMaker::Endpoint", 1)
