#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Operator helper commands: thin shell wrappers around escdeploy.control."""

import os
import shlex
import sys
from typing import List, Tuple

from escdeploy.deploy_constants import SECURITY_DASHBOARD_PATH, SECURITY_UNBAN_PATH
from escdeploy.installer.configs.constants.enums import InstallerResult

# script name -> (control subcommand, description)
APPLICATION_HELPERS = {
    "start.sh": ("start", "Start the application"),
    "stop.sh": ("stop", "Stop the application"),
    "logs.sh": ("logs", "Follow logs (optionally for one service)"),
    "status.sh": ("status", "Container status and resource usage"),
    "deploy.sh": ("deploy", "Pull the latest image and restart"),
    "edit-env.sh": ("edit-env", "Edit and validate the environment file"),
    "security.sh": ("security", "fail2ban and firewall status"),
}

SECURITY_HELPERS = {
    SECURITY_DASHBOARD_PATH: ("dashboard", "fail2ban dashboard"),
    SECURITY_UNBAN_PATH: ("unban", "Unban an address from every jail"),
}


def render_wrapper(install_path: str, subcommand: str, description: str) -> str:
    command = " ".join(
        shlex.quote(part)
        for part in [sys.executable, "-m", "escdeploy.control", "--install-path", install_path, subcommand]
    )
    return "\n".join(["#!/bin/bash", f"# {description}", f'exec {command} "$@"']) + "\n"


def helper_paths(record) -> List[Tuple[str, str, str]]:
    """(path, subcommand, description) for every helper the record calls for."""
    helpers = [
        (os.path.join(record.install_path, name), cmd, desc) for name, (cmd, desc) in APPLICATION_HELPERS.items()
    ]
    if record.security_enabled:
        helpers.extend((path, cmd, desc) for path, (cmd, desc) in SECURITY_HELPERS.items())
    return helpers


def write_helper_commands(record, platform, ctx) -> Tuple[InstallerResult, str]:
    helpers = helper_paths(record)
    for path, subcommand, description in helpers:
        in_install_path = path.startswith(record.install_path.rstrip("/") + "/")
        if not platform.write_file(
            path,
            render_wrapper(record.install_path, subcommand, description),
            mode=0o755,
            privileged=not in_install_path,
        ):
            return InstallerResult.FAILURE, f"Unable to write {path}"
    return InstallerResult.SUCCESS, f"{len(helpers)} helper commands written"
