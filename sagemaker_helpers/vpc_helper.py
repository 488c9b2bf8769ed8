# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
VPC helpers for SageMaker resources.

Provides default VPC layouts (isolated only, or public plus private with a
NAT gateway), a builder that merges user props over those defaults, and a
helper that adds AWS service endpoints so workloads in isolated subnets can
reach SageMaker, ECR and CloudWatch without internet access.
"""

import logging
from typing import Any, Dict, Optional

from aws_cdk import aws_ec2 as ec2
from constructs import Construct

from .utils import add_cfn_nag_suppress_rules, override_props

logger = logging.getLogger(__name__)

INTERFACE_ENDPOINT_SERVICES = {
    "SAGEMAKER_RUNTIME": ec2.InterfaceVpcEndpointAwsService.SAGEMAKER_RUNTIME,
    "SAGEMAKER_API": ec2.InterfaceVpcEndpointAwsService.SAGEMAKER_API,
    "ECR": ec2.InterfaceVpcEndpointAwsService.ECR,
    "ECR_DOCKER": ec2.InterfaceVpcEndpointAwsService.ECR_DOCKER,
    "CLOUDWATCH_LOGS": ec2.InterfaceVpcEndpointAwsService.CLOUDWATCH_LOGS,
    "STS": ec2.InterfaceVpcEndpointAwsService.STS,
}

GATEWAY_ENDPOINT_SERVICES = {
    "S3": ec2.GatewayVpcEndpointAwsService.S3,
    "DYNAMODB": ec2.GatewayVpcEndpointAwsService.DYNAMODB,
}


def default_vpc_props() -> Dict[str, Any]:
    """VPC with isolated subnets only and no NAT gateway."""
    return {
        "nat_gateways": 0,
        "subnet_configuration": [
            ec2.SubnetConfiguration(
                name="isolated",
                subnet_type=ec2.SubnetType.PRIVATE_ISOLATED,
                cidr_mask=18,
            )
        ],
    }


def default_private_vpc_props() -> Dict[str, Any]:
    """VPC with public subnets and private subnets routed through one NAT gateway."""
    return {
        "nat_gateways": 1,
        "subnet_configuration": [
            ec2.SubnetConfiguration(
                name="public",
                subnet_type=ec2.SubnetType.PUBLIC,
                cidr_mask=24,
            ),
            ec2.SubnetConfiguration(
                name="private",
                subnet_type=ec2.SubnetType.PRIVATE_WITH_EGRESS,
                cidr_mask=18,
            ),
        ],
    }


def build_vpc(
    scope: Construct,
    default_props: Optional[Dict[str, Any]] = None,
    user_props: Optional[Dict[str, Any]] = None,
    construct_props: Optional[Dict[str, Any]] = None,
    existing_vpc: Optional[ec2.IVpc] = None,
) -> ec2.IVpc:
    """
    Return existing_vpc, or create a VPC from layered props.

    Props are applied in order: defaults, then user props, then props the
    calling construct requires (for example DNS support for interface
    endpoints).
    """
    if existing_vpc:
        logger.info(f"Using existing VPC {existing_vpc.node.path}")
        return existing_vpc

    props = override_props(
        default_props if default_props is not None else default_vpc_props(),
        user_props,
    )
    props = override_props(props, construct_props)

    vpc = ec2.Vpc(scope, "Vpc", **props)

    for subnet in vpc.public_subnets:
        add_cfn_nag_suppress_rules(
            subnet.node.find_child("Subnet"),
            [
                {
                    "id": "W33",
                    "reason": "Allow Public Subnets to have MapPublicIpOnLaunch set to true",
                }
            ],
        )

    vpc.add_flow_log("FlowLog")

    logger.info(
        f"Built VPC {vpc.node.path} with {len(vpc.public_subnets)} public, "
        f"{len(vpc.private_subnets)} private and {len(vpc.isolated_subnets)} isolated subnets"
    )
    return vpc


def add_aws_service_endpoint(
    scope: Construct, vpc: ec2.IVpc, service: str
) -> ec2.IVpcEndpoint:
    """
    Add a VPC endpoint for an AWS service, once per VPC.

    Args:
        scope: Scope for the endpoint security group
        vpc: VPC receiving the endpoint
        service: Key of INTERFACE_ENDPOINT_SERVICES or GATEWAY_ENDPOINT_SERVICES

    Returns:
        The new or previously added endpoint
    """
    endpoint_id = "".join(part.title() for part in service.split("_")) + "Endpoint"

    existing = vpc.node.try_find_child(endpoint_id)
    if existing is not None:
        return existing

    if service in GATEWAY_ENDPOINT_SERVICES:
        return vpc.add_gateway_endpoint(
            endpoint_id, service=GATEWAY_ENDPOINT_SERVICES[service]
        )

    if service not in INTERFACE_ENDPOINT_SERVICES:
        raise ValueError(f"Unsupported service endpoint: {service}")

    endpoint_security_group = ec2.SecurityGroup(
        scope,
        f"{endpoint_id}SecurityGroup",
        vpc=vpc,
        allow_all_outbound=False,
    )
    endpoint_security_group.add_ingress_rule(
        ec2.Peer.ipv4(vpc.vpc_cidr_block),
        ec2.Port.tcp(443),
        "Allow HTTPS from within VPC",
    )

    logger.info(f"Adding {service} interface endpoint to {vpc.node.path}")
    return vpc.add_interface_endpoint(
        endpoint_id,
        service=INTERFACE_ENDPOINT_SERVICES[service],
        private_dns_enabled=True,
        security_groups=[endpoint_security_group],
    )
