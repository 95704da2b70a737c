#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""
Utility helpers shared by the configurator, the provisioner and the
operator helper commands.
"""

from .logger_utils import InstallerLogger

from .exceptions import (
    ConfigItemNotFoundError,
    ConfigValueValidationError,
    DeployConfigError,
    DeployError,
    FileOperationError,
    OperatorAbortError,
    StepFailedError,
)

__all__ = [
    "InstallerLogger",
    "ConfigItemNotFoundError",
    "ConfigValueValidationError",
    "DeployConfigError",
    "DeployError",
    "FileOperationError",
    "OperatorAbortError",
    "StepFailedError",
]
