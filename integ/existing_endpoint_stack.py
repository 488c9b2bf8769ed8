# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Integration stack for a Lambda function wired to an existing SageMaker endpoint.

The endpoint is deployed first with deploy_sagemaker_endpoint, then handed to
LambdaToSageMakerEndpoint as existing_sagemaker_endpoint_obj, so a single
deployment exercises the helper builders and the construct end to end.
"""

import logging
import os
import re
from dataclasses import dataclass

from aws_cdk import (
    Aws,
    CfnOutput,
    Duration,
    Stack,
    aws_iam as iam,
    aws_lambda as _lambda,
)
from constructs import Construct

from lambda_sagemaker_endpoint import (
    LambdaToSageMakerEndpoint,
    LambdaToSageMakerEndpointProps,
)
from sagemaker_helpers import BuildSageMakerEndpointProps, deploy_sagemaker_endpoint

LAMBDA_CODE_PATH = os.path.join(os.path.dirname(__file__), "lambda")
METRICS_NAMESPACE = "SageMaker/LambdaEndpointInteg"


@dataclass
class ExistingEndpointIntegConfig:
    """Configuration for the existing-endpoint integration stack."""

    image: str = "<AccountId>.dkr.ecr.<region>.amazonaws.com/linear-learner:latest"
    model_data_url: str = "s3://sagemaker-integ-models/models/model.tar.gz"
    lambda_timeout_minutes: int = 5
    lambda_memory_size: int = 128

    def __post_init__(self):
        """Validate configuration parameters after initialization."""
        if not self.image or not self.image.strip():
            raise ValueError("Container image cannot be empty")

        if not re.match(r"^s3://[a-z0-9][a-z0-9.\-]{1,61}[a-z0-9]/.+", self.model_data_url or ""):
            raise ValueError(
                f"Model data URL must be an s3://bucket/key location. Got: {self.model_data_url}"
            )

        if not 1 <= self.lambda_timeout_minutes <= 15:
            raise ValueError(
                f"Lambda timeout must be between 1 and 15 minutes. Got: {self.lambda_timeout_minutes}"
            )

        if not 128 <= self.lambda_memory_size <= 10240:
            raise ValueError(
                f"Lambda memory size must be between 128 and 10240 MB. Got: {self.lambda_memory_size}"
            )


class ExistingSageMakerEndpointStack(Stack):
    """Deploys a SageMaker endpoint and a Lambda function that invokes it."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        config: ExistingEndpointIntegConfig = None,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.logger = logging.getLogger(__name__)
        self.config = config or ExistingEndpointIntegConfig()

        self.template_options.description = (
            "Integration Test for aws-lambda-sagemakerendpoint"
        )

        self._create_sagemaker_role()
        self._deploy_sagemaker_endpoint()
        self._create_lambda_to_endpoint()
        self._create_outputs()

    def _create_sagemaker_role(self) -> None:
        """Create the IAM role assumed by SageMaker."""
        self.sagemaker_role = iam.Role(
            self,
            "SagemakerRole",
            assumed_by=iam.ServicePrincipal("sagemaker.amazonaws.com"),
        )
        self.sagemaker_role.add_managed_policy(
            iam.ManagedPolicy.from_aws_managed_policy_name("AmazonSageMakerFullAccess")
        )
        self.sagemaker_role.add_to_policy(
            iam.PolicyStatement(
                actions=["s3:GetObject", "s3:PutObject", "s3:DeleteObject", "s3:ListBucket"],
                resources=[f"arn:{Aws.PARTITION}:s3:::*"],
            )
        )

    def _deploy_sagemaker_endpoint(self) -> None:
        """Deploy model, endpoint configuration and endpoint."""
        (
            self.sagemaker_endpoint,
            self.sagemaker_endpoint_config,
            self.sagemaker_model,
        ) = deploy_sagemaker_endpoint(
            self,
            BuildSageMakerEndpointProps(
                model_props={
                    "execution_role_arn": self.sagemaker_role.role_arn,
                    "primary_container": {
                        "image": self.config.image,
                        "model_data_url": self.config.model_data_url,
                    },
                },
                role=self.sagemaker_role,
            ),
        )
        self.logger.info("SageMaker endpoint resources defined")

    def _create_lambda_to_endpoint(self) -> None:
        """Wire a Lambda function to the endpoint created above."""
        self.lambda_to_endpoint = LambdaToSageMakerEndpoint(
            self,
            "test-lambda-sagemaker",
            LambdaToSageMakerEndpointProps(
                existing_sagemaker_endpoint_obj=self.sagemaker_endpoint,
                lambda_function_props={
                    "runtime": _lambda.Runtime.PYTHON_3_13,
                    "code": _lambda.Code.from_asset(
                        LAMBDA_CODE_PATH,
                        exclude=[
                            "*.pyc",
                            "__pycache__",
                            "*.md",
                            ".DS_Store",
                            "*.log",
                            "tests",
                            ".pytest_cache",
                        ],
                    ),
                    "handler": "index.handler",
                    "timeout": Duration.minutes(self.config.lambda_timeout_minutes),
                    "memory_size": self.config.lambda_memory_size,
                    "environment": {
                        "LOG_LEVEL": "INFO",
                        "METRICS_NAMESPACE": METRICS_NAMESPACE,
                    },
                },
            ),
        )

        # Allow the handler to publish its invocation metrics
        self.lambda_to_endpoint.lambda_function.add_to_role_policy(
            iam.PolicyStatement(
                actions=["cloudwatch:PutMetricData"],
                resources=["*"],
                conditions={
                    "StringEquals": {"cloudwatch:namespace": METRICS_NAMESPACE}
                },
            )
        )

    def _create_outputs(self) -> None:
        CfnOutput(
            self,
            "EndpointName",
            value=self.sagemaker_endpoint.attr_endpoint_name,
            description="Name of the SageMaker endpoint under test",
        )

        CfnOutput(
            self,
            "LambdaFunctionArn",
            value=self.lambda_to_endpoint.lambda_function.function_arn,
            description="ARN of the Lambda function invoking the endpoint",
        )

        CfnOutput(
            self,
            "SageMakerRoleArn",
            value=self.sagemaker_role.role_arn,
            description="ARN of the SageMaker execution role",
        )
