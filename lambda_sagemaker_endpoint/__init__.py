# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

from .lambda_sagemaker_endpoint_construct import (
    DEFAULT_ENDPOINT_ENVIRONMENT_VARIABLE,
    LambdaToSageMakerEndpoint,
    LambdaToSageMakerEndpointProps,
)
