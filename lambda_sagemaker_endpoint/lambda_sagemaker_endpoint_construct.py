# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
CDK construct connecting a Lambda function to a SageMaker inference endpoint.

The construct either reuses an existing endpoint or deploys a model, endpoint
configuration and endpoint with the sagemaker_helpers builders. It then builds
(or reuses) a Lambda function, passes it the endpoint name through an
environment variable and grants it sagemaker:InvokeEndpoint on that endpoint
only. Optionally everything is placed in a VPC reached through VPC endpoints.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from aws_cdk import (
    Aws,
    aws_ec2 as ec2,
    aws_iam as iam,
    aws_lambda as _lambda,
    aws_sagemaker as sagemaker,
)
from constructs import Construct

from sagemaker_helpers import (
    BuildSageMakerEndpointProps,
    add_aws_service_endpoint,
    build_lambda_function,
    build_sagemaker_endpoint,
    build_vpc,
    default_vpc_props,
    override_props,
)

DEFAULT_ENDPOINT_ENVIRONMENT_VARIABLE = "SAGEMAKER_ENDPOINT_NAME"


@dataclass
class LambdaToSageMakerEndpointProps:
    """Configuration for LambdaToSageMakerEndpoint."""

    # Lambda function, provide exactly one of the two
    existing_lambda_obj: Optional[_lambda.Function] = None
    lambda_function_props: Optional[Dict[str, Any]] = None

    # SageMaker endpoint, either existing or built from the three prop dicts
    existing_sagemaker_endpoint_obj: Optional[sagemaker.CfnEndpoint] = None
    model_props: Optional[Dict[str, Any]] = None
    endpoint_config_props: Optional[Dict[str, Any]] = None
    endpoint_props: Optional[Dict[str, Any]] = None

    # Networking
    existing_vpc: Optional[ec2.IVpc] = None
    vpc_props: Optional[Dict[str, Any]] = None
    deploy_vpc: bool = False

    sagemaker_environment_variable_name: str = DEFAULT_ENDPOINT_ENVIRONMENT_VARIABLE

    def __post_init__(self):
        """Validate combinations of props."""
        if self.existing_lambda_obj and self.lambda_function_props:
            raise ValueError(
                "Either provide lambda_function_props or existing_lambda_obj, but not both"
            )

        if not self.existing_lambda_obj and not self.lambda_function_props:
            raise ValueError(
                "Either lambda_function_props or existing_lambda_obj is required"
            )

        if not self.existing_sagemaker_endpoint_obj and not self.model_props:
            raise ValueError(
                "Either existing_sagemaker_endpoint_obj or at least model_props is required"
            )

        if self.existing_sagemaker_endpoint_obj and (
            self.model_props or self.endpoint_config_props or self.endpoint_props
        ):
            raise ValueError(
                "Either provide existing_sagemaker_endpoint_obj or model_props, "
                "endpoint_config_props and endpoint_props, but not both"
            )

        if self.existing_vpc and (self.deploy_vpc or self.vpc_props):
            raise ValueError(
                "Either provide an existing_vpc or some combination of deploy_vpc "
                "and vpc_props, but not both"
            )

        if self.vpc_props and not self.deploy_vpc:
            raise ValueError("vpc_props is only used when deploy_vpc is true")

        env_name = self.sagemaker_environment_variable_name
        if not env_name or not env_name.strip():
            raise ValueError("SageMaker environment variable name cannot be empty")


class LambdaToSageMakerEndpoint(Construct):
    """Lambda function wired to invoke a SageMaker endpoint."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        props: LambdaToSageMakerEndpointProps,
    ) -> None:
        super().__init__(scope, construct_id)

        self.logger = logging.getLogger(__name__)
        self.props = props

        self.vpc: Optional[ec2.IVpc] = self._build_network()

        self.sagemaker_role: Optional[iam.Role] = None
        self._build_sagemaker_endpoint()

        self._build_lambda_function()

    def _build_network(self) -> Optional[ec2.IVpc]:
        """Build or reuse the VPC and add the endpoints SageMaker traffic needs."""
        if not (self.props.deploy_vpc or self.props.existing_vpc):
            return None

        vpc = build_vpc(
            self,
            default_props=default_vpc_props(),
            user_props=self.props.vpc_props,
            construct_props={"enable_dns_hostnames": True, "enable_dns_support": True},
            existing_vpc=self.props.existing_vpc,
        )

        add_aws_service_endpoint(self, vpc, "SAGEMAKER_RUNTIME")

        # Model artifacts are downloaded from S3 through the VPC
        if not self.props.existing_sagemaker_endpoint_obj:
            add_aws_service_endpoint(self, vpc, "S3")

        return vpc

    def _create_sagemaker_role(self) -> iam.Role:
        """Create the role SageMaker assumes to host the model."""
        role = iam.Role(
            self,
            "SagemakerRole",
            assumed_by=iam.ServicePrincipal("sagemaker.amazonaws.com"),
            description="Execution role for the SageMaker model behind the Lambda function",
        )

        # Pull inference container images
        role.add_to_policy(
            iam.PolicyStatement(
                effect=iam.Effect.ALLOW,
                actions=[
                    "ecr:BatchCheckLayerAvailability",
                    "ecr:GetDownloadUrlForLayer",
                    "ecr:BatchGetImage",
                ],
                resources=[f"arn:{Aws.PARTITION}:ecr:{Aws.REGION}:*:repository/*"],
            )
        )
        role.add_to_policy(
            iam.PolicyStatement(
                effect=iam.Effect.ALLOW,
                actions=["ecr:GetAuthorizationToken"],
                resources=["*"],
            )
        )

        role.add_to_policy(
            iam.PolicyStatement(
                effect=iam.Effect.ALLOW,
                actions=[
                    "logs:CreateLogGroup",
                    "logs:CreateLogStream",
                    "logs:DescribeLogStreams",
                    "logs:PutLogEvents",
                ],
                resources=[
                    f"arn:{Aws.PARTITION}:logs:{Aws.REGION}:{Aws.ACCOUNT_ID}:log-group:/aws/sagemaker/*"
                ],
            )
        )

        role.add_to_policy(
            iam.PolicyStatement(
                effect=iam.Effect.ALLOW,
                actions=["cloudwatch:PutMetricData"],
                resources=["*"],
                conditions={
                    "StringLike": {"cloudwatch:namespace": "/aws/sagemaker/Endpoints*"}
                },
            )
        )

        # Model artifacts
        role.add_to_policy(
            iam.PolicyStatement(
                effect=iam.Effect.ALLOW,
                actions=["s3:GetObject", "s3:ListBucket"],
                resources=[f"arn:{Aws.PARTITION}:s3:::*"],
            )
        )

        if self.vpc:
            role.add_to_policy(
                iam.PolicyStatement(
                    effect=iam.Effect.ALLOW,
                    actions=[
                        "ec2:CreateNetworkInterface",
                        "ec2:CreateNetworkInterfacePermission",
                        "ec2:DeleteNetworkInterface",
                        "ec2:DeleteNetworkInterfacePermission",
                        "ec2:DescribeNetworkInterfaces",
                        "ec2:DescribeVpcs",
                        "ec2:DescribeDhcpOptions",
                        "ec2:DescribeSubnets",
                        "ec2:DescribeSecurityGroups",
                    ],
                    resources=["*"],
                )
            )

        return role

    def _build_sagemaker_endpoint(self) -> None:
        """Reuse the existing endpoint or deploy model, config and endpoint."""
        model_props = self.props.model_props
        if not self.props.existing_sagemaker_endpoint_obj:
            self.sagemaker_role = self._create_sagemaker_role()
            model_props = override_props(
                {"execution_role_arn": self.sagemaker_role.role_arn},
                self.props.model_props,
            )

        (
            self.sagemaker_endpoint,
            self.sagemaker_endpoint_config,
            self.sagemaker_model,
        ) = build_sagemaker_endpoint(
            self,
            BuildSageMakerEndpointProps(
                existing_sagemaker_endpoint_obj=self.props.existing_sagemaker_endpoint_obj,
                model_props=model_props,
                endpoint_config_props=self.props.endpoint_config_props,
                endpoint_props=self.props.endpoint_props,
                vpc=self.vpc,
                role=self.sagemaker_role,
            ),
        )

    def _build_lambda_function(self) -> None:
        """Build or reuse the Lambda function and grant it endpoint access."""
        self.lambda_function = build_lambda_function(
            self,
            existing_lambda_obj=self.props.existing_lambda_obj,
            lambda_function_props=self.props.lambda_function_props,
            vpc=self.vpc,
        )

        self.lambda_function.add_environment(
            self.props.sagemaker_environment_variable_name,
            self.sagemaker_endpoint.attr_endpoint_name,
        )

        # CfnEndpoint's Ref is the endpoint ARN
        self.lambda_function.add_to_role_policy(
            iam.PolicyStatement(
                effect=iam.Effect.ALLOW,
                actions=["sagemaker:InvokeEndpoint"],
                resources=[self.sagemaker_endpoint.ref],
            )
        )

        self.logger.info(
            f"Granted {self.lambda_function.node.path} invoke access to SageMaker endpoint"
        )
