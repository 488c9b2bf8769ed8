#!/usr/bin/env python3

# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

import os
import aws_cdk as cdk
from cdk_nag import AwsSolutionsChecks, NagSuppressions

from integ.existing_endpoint_stack import (
    ExistingEndpointIntegConfig,
    ExistingSageMakerEndpointStack,
)


app = cdk.App()

# Configure AWS environment
env = cdk.Environment(
    account=os.getenv("CDK_DEFAULT_ACCOUNT"), region=os.getenv("CDK_DEFAULT_REGION")
)

##########################
# Integration Stack
##########################

config = ExistingEndpointIntegConfig(
    image=app.node.try_get_context("model_image")
    or ExistingEndpointIntegConfig.image,
    model_data_url=app.node.try_get_context("model_data_url")
    or ExistingEndpointIntegConfig.model_data_url,
)

integ_stack = ExistingSageMakerEndpointStack(
    app,
    "test-lambda-sagemakerendpoint",
    config=config,
    env=env,
)

cdk.Tags.of(integ_stack).add("Project", "sagemaker-helpers")
cdk.Tags.of(integ_stack).add("Component", "IntegrationTest")

# Apply CDK Nag security checks
cdk.Aspects.of(app).add(AwsSolutionsChecks(verbose=True))

NagSuppressions.add_stack_suppressions(
    integ_stack,
    [
        {
            "id": "AwsSolutions-IAM4",
            "reason": "AmazonSageMakerFullAccess is attached to the integration test SageMaker role only.",
            "applies_to": [
                "Policy::arn:<AWS::Partition>:iam::aws:policy/AmazonSageMakerFullAccess",
            ],
        },
        {
            "id": "AwsSolutions-IAM5",
            "reason": "Model artifacts, log groups and X-Ray do not support narrower resources in this test.",
        },
        {
            "id": "AwsSolutions-SM2",
            "reason": "The endpoint configuration is encrypted with a customer managed KMS key.",
        },
        {
            "id": "AwsSolutions-SM1",
            "reason": "The integration model runs outside a VPC to keep the test self-contained.",
        },
        {
            "id": "AwsSolutions-L1",
            "reason": "Runtime is pinned so the integration test is reproducible.",
        },
    ],
)

app.synth()
