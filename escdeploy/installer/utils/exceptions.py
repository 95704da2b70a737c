#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Custom exceptions for the deployment workflow."""

from typing import Any, Optional


class DeployError(Exception):
    """Base class for all deployment errors."""

    pass


class DeployConfigError(DeployError):
    """Base class for configuration-related errors."""

    pass


class ConfigItemNotFoundError(DeployConfigError):
    """Raised when a configuration item is not found."""

    def __init__(self, key: str):
        super().__init__(f"Configuration item '{key}' not found.")
        self.key = key


class ConfigValueValidationError(DeployConfigError):
    """Raised when a configuration value fails validation."""

    def __init__(self, key: str, value: Any, message: str):
        super().__init__(f"Invalid value for '{key}': {message} (value was '{value}').")
        self.key = key
        self.value = value


class FileOperationError(DeployConfigError):
    """Raised for errors during file operations (load/save)."""

    pass


class StepFailedError(DeployError):
    """Raised when a provisioning step fails; the run stops at that step."""

    def __init__(self, step: str, cause: Optional[str] = None):
        super().__init__(f"Step '{step}' failed{f': {cause}' if cause else ''}")
        self.step = step
        self.cause = cause


class OperatorAbortError(DeployError):
    """Raised when the operator declines to continue."""

    pass
