#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Platform-specific provisioner implementations."""

from escdeploy.deploy_common import GetOsRelease
from escdeploy.deploy_constants import SUPPORTED_DISTROS

from .base import BaseInstaller
from .linux import LinuxInstaller


def get_platform_installer(ui, debug: bool = False) -> BaseInstaller:
    """Return the provisioner for this host, refusing distributions it does not support."""
    distro = GetOsRelease().get("ID", "").lower()
    if distro in SUPPORTED_DISTROS:
        return LinuxInstaller(ui, debug)
    raise NotImplementedError(
        f"Distribution '{distro or 'unknown'}' is not supported; use {' or '.join(SUPPORTED_DISTROS)}"
    )


__all__ = [
    "BaseInstaller",
    "LinuxInstaller",
    "get_platform_installer",
]
