#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""ConfigItem definitions, one module per concern."""

from .deployment import ALL_DEPLOYMENT_CONFIG_ITEMS_DICT
from .tls import ALL_TLS_CONFIG_ITEMS_DICT
from .security import ALL_SECURITY_CONFIG_ITEMS_DICT


def get_all_config_items_dict():
    """Every ConfigItem definition keyed by its KEY_CONFIG_ITEM_... key, in prompt order."""
    return {
        **ALL_DEPLOYMENT_CONFIG_ITEMS_DICT,
        **ALL_TLS_CONFIG_ITEMS_DICT,
        **ALL_SECURITY_CONFIG_ITEMS_DICT,
    }
