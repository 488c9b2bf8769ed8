# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Builders for SageMaker notebook instances, models, endpoint configurations
and endpoints.

The builders apply secure defaults (customer managed KMS keys, VPC placement,
least privilege role statements), let callers override any default through
plain keyword-argument dicts, and wire the CloudFormation dependencies between
the resources they create. Each builder also accepts an existing resource, in
which case nothing is created.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from aws_cdk import (
    Aws,
    aws_ec2 as ec2,
    aws_iam as iam,
    aws_sagemaker as sagemaker,
)
from constructs import Construct

from .kms_helper import build_encryption_key
from .sagemaker_defaults import (
    default_sagemaker_endpoint_config_props,
    default_sagemaker_endpoint_props,
    default_sagemaker_model_props,
    default_sagemaker_notebook_props,
)
from .utils import add_cfn_nag_suppress_rules, override_props
from .vpc_helper import build_vpc, default_private_vpc_props

logger = logging.getLogger(__name__)


@dataclass
class BuildSagemakerNotebookProps:
    """Inputs for build_sagemaker_notebook."""

    # Role assumed by the notebook instance
    role: iam.Role
    # Keyword arguments for CfnNotebookInstance, merged over the defaults
    sagemaker_notebook_props: Optional[Dict[str, Any]] = None
    # None is treated as True
    deploy_inside_vpc: Optional[bool] = None
    # When set, sagemaker_notebook_props is ignored and nothing is created
    existing_notebook_obj: Optional[sagemaker.CfnNotebookInstance] = None


@dataclass
class BuildSageMakerEndpointProps:
    """Inputs for build_sagemaker_endpoint and deploy_sagemaker_endpoint."""

    # When set, the model, endpoint config and endpoint props are ignored
    existing_sagemaker_endpoint_obj: Optional[sagemaker.CfnEndpoint] = None
    # Keyword arguments for CfnModel, primary_container is required
    model_props: Optional[Dict[str, Any]] = None
    # Keyword arguments for CfnEndpointConfig
    endpoint_config_props: Optional[Dict[str, Any]] = None
    # Keyword arguments for CfnEndpoint
    endpoint_props: Optional[Dict[str, Any]] = None
    # VPC the model containers are attached to
    vpc: Optional[ec2.IVpc] = None
    # Selects private subnets instead of isolated ones for the model
    deploy_nat_gateway: Optional[bool] = None
    # Role assumed by SageMaker, not needed with an existing endpoint
    role: Optional[iam.Role] = None


def _as_struct(value: Any, struct_type: type) -> Any:
    """Build struct_type from a snake_case dict, pass anything else through."""
    if isinstance(value, Mapping):
        return struct_type(**value)
    return value


def add_permissions(role: iam.Role) -> None:
    """Grant a notebook role what it needs to train, host and invoke models."""
    # Training and hosting
    role.add_to_policy(
        iam.PolicyStatement(
            resources=[f"arn:{Aws.PARTITION}:sagemaker:{Aws.REGION}:{Aws.ACCOUNT_ID}:*"],
            actions=[
                "sagemaker:CreateTrainingJob",
                "sagemaker:DescribeTrainingJob",
                "sagemaker:CreateModel",
                "sagemaker:DescribeModel",
                "sagemaker:DeleteModel",
                "sagemaker:CreateEndpoint",
                "sagemaker:CreateEndpointConfig",
                "sagemaker:DescribeEndpoint",
                "sagemaker:DescribeEndpointConfig",
                "sagemaker:DeleteEndpoint",
                "sagemaker:DeleteEndpointConfig",
                "sagemaker:InvokeEndpoint",
            ],
        )
    )

    # CloudWatch logging
    role.add_to_policy(
        iam.PolicyStatement(
            resources=[
                f"arn:{Aws.PARTITION}:logs:{Aws.REGION}:{Aws.ACCOUNT_ID}:log-group:/aws/sagemaker/*"
            ],
            actions=[
                "logs:CreateLogGroup",
                "logs:CreateLogStream",
                "logs:DescribeLogStreams",
                "logs:GetLogEvents",
                "logs:PutLogEvents",
            ],
        )
    )

    role.add_to_policy(
        iam.PolicyStatement(resources=[role.role_arn], actions=["iam:GetRole"])
    )

    # PassRole restricted to SageMaker
    role.add_to_policy(
        iam.PolicyStatement(
            resources=[role.role_arn],
            actions=["iam:PassRole"],
            conditions={
                "StringLike": {"iam:PassedToService": "sagemaker.amazonaws.com"}
            },
        )
    )


def build_sagemaker_notebook(
    scope: Construct, props: BuildSagemakerNotebookProps
) -> Tuple[
    sagemaker.CfnNotebookInstance,
    Optional[ec2.IVpc],
    Optional[ec2.SecurityGroup],
]:
    """
    Create a SageMaker notebook instance, or return the existing one.

    Returns:
        (notebook, vpc, security_group). The VPC and security group are only
        set when this call created them.
    """
    if props.existing_notebook_obj:
        logger.info("Using existing SageMaker notebook instance")
        return props.existing_notebook_obj, None, None

    user_props = props.sagemaker_notebook_props or {}
    subnet_id = user_props.get("subnet_id")
    security_group_ids = user_props.get("security_group_ids")

    if (subnet_id is None) != (security_group_ids is None):
        raise ValueError(
            "Must define both sagemaker_notebook_props.subnet_id and "
            "sagemaker_notebook_props.security_group_ids"
        )

    add_permissions(props.role)

    kms_key_id = user_props.get("kms_key_id")
    if kms_key_id is None:
        kms_key_id = build_encryption_key(scope).key_id

    vpc = None
    security_group = None

    if props.deploy_inside_vpc is None or props.deploy_inside_vpc:
        if subnet_id is None and security_group_ids is None:
            vpc = build_vpc(scope, default_props=default_private_vpc_props())
            security_group = ec2.SecurityGroup(
                scope,
                "SecurityGroup",
                vpc=vpc,
                allow_all_outbound=False,
            )
            security_group.add_egress_rule(ec2.Peer.any_ipv4(), ec2.Port.tcp(443))
            add_cfn_nag_suppress_rules(
                security_group,
                [
                    {
                        "id": "W5",
                        "reason": "Allow notebook users to access the Internet from the notebook",
                    }
                ],
            )
            logger.info("Created VPC and security group for the notebook instance")

            notebook_props = default_sagemaker_notebook_props(
                props.role.role_arn,
                kms_key_id,
                vpc.private_subnets[0].subnet_id,
                [security_group.security_group_id],
            )
        else:
            notebook_props = default_sagemaker_notebook_props(
                props.role.role_arn, kms_key_id, subnet_id, security_group_ids
            )
    else:
        notebook_props = default_sagemaker_notebook_props(
            props.role.role_arn, kms_key_id
        )

    notebook_props = override_props(notebook_props, user_props)

    notebook = sagemaker.CfnNotebookInstance(
        scope, "SagemakerNotebook", **notebook_props
    )

    return notebook, vpc, security_group


def build_sagemaker_endpoint(
    scope: Construct, props: BuildSageMakerEndpointProps
) -> Tuple[
    sagemaker.CfnEndpoint,
    Optional[sagemaker.CfnEndpointConfig],
    Optional[sagemaker.CfnModel],
]:
    """Return the existing endpoint, or deploy one from model_props."""
    if props.existing_sagemaker_endpoint_obj:
        logger.info("Using existing SageMaker endpoint")
        return props.existing_sagemaker_endpoint_obj, None, None

    if not props.model_props:
        raise ValueError(
            "Either existing_sagemaker_endpoint_obj or at least model_props is required"
        )

    return deploy_sagemaker_endpoint(scope, props)


def deploy_sagemaker_endpoint(
    scope: Construct, props: BuildSageMakerEndpointProps
) -> Tuple[sagemaker.CfnEndpoint, sagemaker.CfnEndpointConfig, sagemaker.CfnModel]:
    """
    Create a model, an endpoint config and an endpoint, in dependency order.

    Returns:
        (endpoint, endpoint_config, model)
    """
    if not (props.model_props and props.role):
        raise ValueError(
            "You need to provide at least model_props and SageMaker IAM Role "
            "to create Sagemaker Endpoint"
        )

    model = create_sagemaker_model(
        scope, props.model_props, props.role, props.vpc, props.deploy_nat_gateway
    )

    endpoint_config = create_sagemaker_endpoint_config(
        scope, model.attr_model_name, props.endpoint_config_props
    )
    endpoint_config.add_dependency(model)

    endpoint = create_sagemaker_endpoint(
        scope, endpoint_config.attr_endpoint_config_name, props.endpoint_props
    )
    endpoint.add_dependency(endpoint_config)

    return endpoint, endpoint_config, model


def create_sagemaker_model(
    scope: Construct,
    model_props: Dict[str, Any],
    role: iam.Role,
    vpc: Optional[ec2.IVpc] = None,
    deploy_nat_gateway: Optional[bool] = None,
) -> sagemaker.CfnModel:
    primary_container = model_props.get("primary_container")
    if not primary_container:
        raise ValueError(
            "You need to provide at least primary_container to create Sagemaker Model"
        )

    vpc_config = None
    if vpc:
        model_security_group = ec2.SecurityGroup(
            scope,
            "ReplaceModelDefaultSecurityGroup",
            vpc=vpc,
            allow_all_outbound=True,
        )
        model_security_group.add_ingress_rule(
            ec2.Peer.ipv4(vpc.vpc_cidr_block), ec2.Port.tcp(443)
        )
        add_cfn_nag_suppress_rules(
            model_security_group,
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

        # Isolated subnets unless a NAT gateway is requested or none exist
        if not deploy_nat_gateway and vpc.isolated_subnets:
            subnet_type = ec2.SubnetType.PRIVATE_ISOLATED
        else:
            subnet_type = ec2.SubnetType.PRIVATE_WITH_EGRESS

        vpc_config = sagemaker.CfnModel.VpcConfigProperty(
            subnets=vpc.select_subnets(
                subnet_type=subnet_type, one_per_az=True
            ).subnet_ids,
            security_group_ids=[model_security_group.security_group_id],
        )
        logger.info(f"Attaching SageMaker model to {subnet_type.name} subnets")

    final_model_props = default_sagemaker_model_props(
        model_props.get("execution_role_arn"), primary_container, vpc_config
    )
    final_model_props = override_props(final_model_props, model_props)

    # Nested dicts reach CloudFormation as-is, snake_case keys must become structs
    final_model_props["primary_container"] = _as_struct(
        final_model_props["primary_container"],
        sagemaker.CfnModel.ContainerDefinitionProperty,
    )
    if final_model_props.get("vpc_config") is not None:
        final_model_props["vpc_config"] = _as_struct(
            final_model_props["vpc_config"], sagemaker.CfnModel.VpcConfigProperty
        )

    model = sagemaker.CfnModel(scope, "SageMakerModel", **final_model_props)
    model.node.add_dependency(role)

    return model


def create_sagemaker_endpoint_config(
    scope: Construct,
    model_name: str,
    endpoint_config_props: Optional[Dict[str, Any]] = None,
) -> sagemaker.CfnEndpointConfig:
    kms_key_id = (endpoint_config_props or {}).get("kms_key_id")
    if not kms_key_id:
        kms_key_id = build_encryption_key(scope).key_id

    final_props = default_sagemaker_endpoint_config_props(model_name, kms_key_id)
    final_props = override_props(final_props, endpoint_config_props)
    final_props["production_variants"] = [
        _as_struct(variant, sagemaker.CfnEndpointConfig.ProductionVariantProperty)
        for variant in final_props["production_variants"]
    ]

    return sagemaker.CfnEndpointConfig(
        scope, "SageMakerEndpointConfig", **final_props
    )


def create_sagemaker_endpoint(
    scope: Construct,
    endpoint_config_name: str,
    endpoint_props: Optional[Dict[str, Any]] = None,
) -> sagemaker.CfnEndpoint:
    final_props = default_sagemaker_endpoint_props(endpoint_config_name)
    final_props = override_props(final_props, endpoint_props)

    return sagemaker.CfnEndpoint(scope, "SageMakerEndpoint", **final_props)
