# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Builders that assemble SageMaker notebooks, models, endpoint configurations
and endpoints, with their IAM, KMS and VPC wiring, into CDK constructs.
"""

from .kms_helper import build_encryption_key
from .lambda_helper import build_lambda_function
from .sagemaker_helper import (
    BuildSageMakerEndpointProps,
    BuildSagemakerNotebookProps,
    add_permissions,
    build_sagemaker_endpoint,
    build_sagemaker_notebook,
    create_sagemaker_endpoint,
    create_sagemaker_endpoint_config,
    create_sagemaker_model,
    deploy_sagemaker_endpoint,
)
from .utils import add_cfn_nag_suppress_rules, override_props
from .vpc_helper import (
    add_aws_service_endpoint,
    build_vpc,
    default_private_vpc_props,
    default_vpc_props,
)

__version__ = "1.0.0"
