#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.


"""
Deployment target configuration items.

The domain served by the reverse proxy, the container registry account used
to pull the private application image, and the directory the compose
project is checked out into.
"""

from escdeploy.deploy_constants import DEFAULT_INSTALL_PATH
from escdeploy.installer.core.config_item import ConfigItem
from escdeploy.installer.core.validation import (
    validate_domain_name,
    validate_install_path,
    validate_non_empty,
)
from escdeploy.installer.configs.constants.configuration_item_keys import (
    KEY_CONFIG_ITEM_DOMAIN_NAME,
    KEY_CONFIG_ITEM_INSTALL_PATH,
    KEY_CONFIG_ITEM_REGISTRY_USERNAME,
)

CONFIG_ITEM_DOMAIN_NAME = ConfigItem(
    key=KEY_CONFIG_ITEM_DOMAIN_NAME,
    label="Domain",
    default_value="",
    validator=validate_domain_name,
    question="Enter your domain name (e.g., example.com)",
)

CONFIG_ITEM_REGISTRY_USERNAME = ConfigItem(
    key=KEY_CONFIG_ITEM_REGISTRY_USERNAME,
    label="Docker Hub User",
    default_value="",
    validator=validate_non_empty,
    question="Docker Hub username",
)

CONFIG_ITEM_INSTALL_PATH = ConfigItem(
    key=KEY_CONFIG_ITEM_INSTALL_PATH,
    label="App Directory",
    default_value=DEFAULT_INSTALL_PATH,
    validator=validate_install_path,
    question="Application directory",
)


def get_deployment_config_item_dict():
    """Get all ConfigItem objects from this module.

    Returns:
        Dict mapping configuration key strings to their ConfigItem objects
    """
    config_items = {}
    for key_name, key_value in globals().items():
        if isinstance(key_value, ConfigItem):
            config_items[key_value.key] = key_value
    return config_items


# A dictionary mapping configuration keys to their ConfigItem objects, created once at module load.
ALL_DEPLOYMENT_CONFIG_ITEMS_DICT = get_deployment_config_item_dict()
