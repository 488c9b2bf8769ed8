# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Property merging and cfn_nag metadata utilities shared by the builders.
"""

import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Optional

import aws_cdk as cdk
from constructs import IConstruct

logger = logging.getLogger(__name__)


def override_props(
    default_props: Mapping, user_props: Optional[Mapping] = None
) -> Dict[str, Any]:
    """
    Merge user supplied props over a set of default props.

    Nested mappings are merged key by key. Any other value supplied by the
    user, lists and CDK property structs included, replaces the default as a
    whole. Neither input is modified.

    Args:
        default_props: Keyword arguments the builder would use on its own
        user_props: Keyword arguments supplied by the caller

    Returns:
        New dict of keyword arguments for a CDK construct
    """
    merged = dict(default_props)
    if not user_props:
        return merged

    for key, value in user_props.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = override_props(current, value)
        else:
            merged[key] = value

    logger.debug(f"Merged props keys: {sorted(merged.keys())}")
    return merged


def add_cfn_nag_suppress_rules(
    resource: IConstruct, rules: List[Dict[str, str]]
) -> None:
    """
    Append cfn_nag suppressions to the metadata of a CloudFormation resource.

    Args:
        resource: L1 resource, or an L2 construct whose default child is one
        rules: List of {"id": ..., "reason": ...} dicts
    """
    cfn_resource = resource
    if not isinstance(cfn_resource, cdk.CfnResource):
        cfn_resource = resource.node.default_child

    metadata = dict(cfn_resource.cfn_options.metadata or {})
    cfn_nag = dict(metadata.get("cfn_nag", {}))
    cfn_nag["rules_to_suppress"] = list(cfn_nag.get("rules_to_suppress", [])) + list(
        rules
    )
    metadata["cfn_nag"] = cfn_nag
    cfn_resource.cfn_options.metadata = metadata
