# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

from .existing_endpoint_stack import (
    ExistingEndpointIntegConfig,
    ExistingSageMakerEndpointStack,
)
