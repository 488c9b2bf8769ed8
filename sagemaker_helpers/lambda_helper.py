# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

import logging
from typing import Any, Dict, Optional

from aws_cdk import (
    Aws,
    aws_ec2 as ec2,
    aws_iam as iam,
    aws_lambda as _lambda,
)
from constructs import Construct

from .utils import add_cfn_nag_suppress_rules, override_props

logger = logging.getLogger(__name__)


def default_lambda_props(role: iam.Role) -> Dict[str, Any]:
    return {
        "role": role,
        "tracing": _lambda.Tracing.ACTIVE,
    }


def _build_lambda_role(scope: Construct) -> iam.Role:
    """Service role limited to writing the function's own CloudWatch logs."""
    return iam.Role(
        scope,
        "LambdaFunctionServiceRole",
        assumed_by=iam.ServicePrincipal("lambda.amazonaws.com"),
        inline_policies={
            "LambdaFunctionServiceRolePolicy": iam.PolicyDocument(
                statements=[
                    iam.PolicyStatement(
                        effect=iam.Effect.ALLOW,
                        actions=[
                            "logs:CreateLogGroup",
                            "logs:CreateLogStream",
                            "logs:PutLogEvents",
                        ],
                        resources=[
                            f"arn:{Aws.PARTITION}:logs:{Aws.REGION}:{Aws.ACCOUNT_ID}:log-group:/aws/lambda/*"
                        ],
                    )
                ]
            )
        },
    )


def build_lambda_function(
    scope: Construct,
    existing_lambda_obj: Optional[_lambda.Function] = None,
    lambda_function_props: Optional[Dict[str, Any]] = None,
    vpc: Optional[ec2.IVpc] = None,
) -> _lambda.Function:
    """
    Return existing_lambda_obj, or create a function from lambda_function_props.

    With a VPC the new function gets its own security group and the ENI
    permissions it needs. An existing function cannot be moved into a VPC.
    """
    if existing_lambda_obj:
        if vpc and not existing_lambda_obj.is_bound_to_vpc:
            raise ValueError(
                "A Lambda function must be bound to a VPC upon creation, "
                "it cannot be added to a VPC later"
            )
        logger.info(f"Using existing Lambda function {existing_lambda_obj.node.path}")
        return existing_lambda_obj

    if not lambda_function_props:
        raise ValueError("Either existing_lambda_obj or lambda_function_props is required")

    role = _build_lambda_role(scope)
    props = default_lambda_props(role)

    if vpc:
        lambda_security_group = ec2.SecurityGroup(
            scope,
            "ReplaceDefaultSecurityGroup",
            vpc=vpc,
            allow_all_outbound=True,
        )
        add_cfn_nag_suppress_rules(
            lambda_security_group,
            [
                {
                    "id": "W5",
                    "reason": "Egress of 0.0.0.0/0 is default and generally considered OK",
                },
                {
                    "id": "W40",
                    "reason": "Egress IPProtocol of -1 is default and generally considered OK",
                },
            ],
        )

        # ENI management does not support resource-level permissions
        role.add_to_policy(
            iam.PolicyStatement(
                actions=[
                    "ec2:CreateNetworkInterface",
                    "ec2:DescribeNetworkInterfaces",
                    "ec2:DeleteNetworkInterface",
                    "ec2:AssignPrivateIpAddresses",
                    "ec2:UnassignPrivateIpAddresses",
                ],
                resources=["*"],
            )
        )
        props.update(vpc=vpc, security_groups=[lambda_security_group])

    props = override_props(props, lambda_function_props)

    function = _lambda.Function(scope, "LambdaFunction", **props)
    logger.info(f"Built Lambda function {function.node.path}")
    return function
