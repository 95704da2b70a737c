#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Core components for the deployment workflow.

This module contains the settings model, the per-run installation context
and the ordered list of provisioning steps.
"""

from .config_item import ConfigItem
from .deploy_config import DeployConfig, SettingsRecord
from .install_context import CertificatePaths, InstallContext

__all__ = [
    "ConfigItem",
    "DeployConfig",
    "SettingsRecord",
    "CertificatePaths",
    "InstallContext",
]
