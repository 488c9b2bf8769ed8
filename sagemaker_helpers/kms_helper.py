# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

import logging
from typing import Any, Dict, Optional

from aws_cdk import RemovalPolicy, aws_kms as kms
from constructs import Construct

from .utils import override_props

logger = logging.getLogger(__name__)


def default_encryption_props() -> Dict[str, Any]:
    """Default props for customer managed keys."""
    return {
        "removal_policy": RemovalPolicy.DESTROY,
        "enable_key_rotation": True,
    }


def build_encryption_key(
    scope: Construct, key_props: Optional[Dict[str, Any]] = None
) -> kms.Key:
    """Create a KMS key with rotation enabled, overridable through key_props."""
    props = override_props(default_encryption_props(), key_props)

    logger.info(f"Building encryption key in {scope.node.path}")
    return kms.Key(scope, "EncryptionKey", **props)
