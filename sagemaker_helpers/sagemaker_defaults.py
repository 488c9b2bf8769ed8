# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Default props for SageMaker CloudFormation resources.

Each function returns a dict of keyword arguments for the matching
aws_sagemaker.Cfn* construct.
"""

from typing import Any, Dict, List, Optional

from aws_cdk import aws_sagemaker as sagemaker


def default_sagemaker_notebook_props(
    role_arn: str,
    kms_key_id: str,
    subnet_id: Optional[str] = None,
    security_group_ids: Optional[List[str]] = None,
) -> Dict[str, Any]:
    props = {
        "instance_type": "ml.t2.medium",
        "kms_key_id": kms_key_id,
        "role_arn": role_arn,
    }

    # Notebooks placed in a subnet reach the internet through the VPC only
    if subnet_id:
        props.update(
            subnet_id=subnet_id,
            security_group_ids=security_group_ids,
            direct_internet_access="Disabled",
        )

    return props


def default_sagemaker_model_props(
    execution_role_arn: Optional[str],
    primary_container: Any,
    vpc_config: Optional[sagemaker.CfnModel.VpcConfigProperty] = None,
) -> Dict[str, Any]:
    props = {
        "execution_role_arn": execution_role_arn,
        "primary_container": primary_container,
    }
    if vpc_config:
        props["vpc_config"] = vpc_config

    return props


def default_sagemaker_endpoint_config_props(
    model_name: str, kms_key_id: str
) -> Dict[str, Any]:
    return {
        "production_variants": [
            sagemaker.CfnEndpointConfig.ProductionVariantProperty(
                variant_name="AllTraffic",
                model_name=model_name,
                initial_instance_count=1,
                initial_variant_weight=1.0,
                instance_type="ml.m4.xlarge",
            )
        ],
        "kms_key_id": kms_key_id,
    }


def default_sagemaker_endpoint_props(endpoint_config_name: str) -> Dict[str, Any]:
    return {"endpoint_config_name": endpoint_config_name}
