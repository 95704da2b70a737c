#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.


"""TLS certificate configuration items."""

from escdeploy.installer.core.config_item import ConfigItem
from escdeploy.installer.core.validation import validate_optional_email, validate_tls_mode
from escdeploy.installer.configs.constants.constants import TLS_MODE_CHOICES, TLS_MODE_DEFAULT
from escdeploy.installer.configs.constants.configuration_item_keys import (
    KEY_CONFIG_ITEM_TLS_CONTACT_EMAIL,
    KEY_CONFIG_ITEM_TLS_MODE,
)

CONFIG_ITEM_TLS_MODE = ConfigItem(
    key=KEY_CONFIG_ITEM_TLS_MODE,
    label="SSL",
    default_value=TLS_MODE_DEFAULT,
    choices=TLS_MODE_CHOICES,
    validator=validate_tls_mode,
    question="Choose SSL certificate option",
)

CONFIG_ITEM_TLS_CONTACT_EMAIL = ConfigItem(
    key=KEY_CONFIG_ITEM_TLS_CONTACT_EMAIL,
    label="SSL Email",
    default_value="",
    validator=validate_optional_email,
    accept_blank=True,
    question="Email for Let's Encrypt notifications",
)


def get_tls_config_item_dict():
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
ALL_TLS_CONFIG_ITEMS_DICT = get_tls_config_item_dict()
