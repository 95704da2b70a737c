#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.


"""
Security profile configuration items.

Enabling the profile adds CDN-only access, request rate limiting and the
fail2ban jails; alerts go to the security contact email.
"""

from escdeploy.installer.core.config_item import ConfigItem
from escdeploy.installer.core.validation import validate_optional_email
from escdeploy.installer.configs.constants.configuration_item_keys import (
    KEY_CONFIG_ITEM_SECURITY_CONTACT_EMAIL,
    KEY_CONFIG_ITEM_SECURITY_ENABLED,
)

CONFIG_ITEM_SECURITY_ENABLED = ConfigItem(
    key=KEY_CONFIG_ITEM_SECURITY_ENABLED,
    label="Security Features",
    default_value=True,
    validator=lambda x: isinstance(x, bool),
    question="Enable security features? (Recommended)",
)

CONFIG_ITEM_SECURITY_CONTACT_EMAIL = ConfigItem(
    key=KEY_CONFIG_ITEM_SECURITY_CONTACT_EMAIL,
    label="Admin Email",
    default_value="",
    validator=validate_optional_email,
    accept_blank=True,
    question="Admin email for security alerts",
)


def get_security_config_item_dict():
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
ALL_SECURITY_CONFIG_ITEMS_DICT = get_security_config_item_dict()
