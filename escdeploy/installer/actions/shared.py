#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""
Provisioning actions shared by every platform.

Each action takes (record, platform, ctx), performs its work through the
platform's run_process()/write_file(), and returns (InstallerResult, message).
"""

import getpass
import os
import time
from typing import List, Optional, Tuple

from escdeploy.deploy_common import GetComposeServiceNames
from escdeploy.deploy_constants import (
    APPLICATION_IMAGE,
    COMPOSE_FILE_NAME,
    COMPOSE_PLUGIN_PACKAGE,
    FIREWALL_ALLOWED_TCP_PORTS,
    READINESS_POLL_ATTEMPTS,
    READINESS_POLL_INTERVAL_SEC,
    SERVICE_ACCOUNT_NAME,
    SERVICE_ACCOUNT_SHELL,
    SOURCE_REPOSITORY_URL,
    SYSTEMD_UNIT_NAME,
    SYSTEMD_UNIT_PATH,
)
from escdeploy.installer.configs.constants.enums import InstallerResult
from escdeploy.installer.utils.logger_utils import InstallerLogger


def operator_user() -> str:
    """The account of the person running the deployment, even under sudo."""
    return os.getenv("SUDO_USER") or getpass.getuser()


def compose_command(install_path: str) -> List[str]:
    return ["docker", "compose", "-f", os.path.join(install_path, COMPOSE_FILE_NAME)]


def _run_all(platform, commands, privileged: bool = True, cwd: Optional[str] = None) -> Tuple[bool, str]:
    for command in commands:
        err, out = platform.run_process(command, privileged=privileged, cwd=cwd)
        if err != 0:
            return False, f"{' '.join(command)} failed: {' '.join(out[-3:])}"
    return True, ""


###################################################################################################
def install_system_packages(record, platform, ctx) -> Tuple[InstallerResult, str]:
    if not platform.install_dependencies():
        return InstallerResult.FAILURE, "Unable to install system packages"
    return InstallerResult.SUCCESS, "System packages up to date"


def install_container_runtime(record, platform, ctx) -> Tuple[InstallerResult, str]:
    """Docker engine, the operator's docker group membership, and the compose plugin."""
    if platform.is_docker_installed():
        InstallerLogger.info("Docker is already installed")
    elif not platform.install_docker():
        return InstallerResult.FAILURE, "Docker installation failed"

    user = operator_user()
    if user != "root":
        err, out = platform.run_process(["usermod", "-aG", "docker", user], privileged=True)
        if err != 0:
            return InstallerResult.FAILURE, f'Adding {user} to the "docker" group failed: {" ".join(out)}'
        InstallerLogger.info(f'{user} added to the "docker" group (takes effect at next login)')

    if not platform.is_docker_compose_installed() and not platform.install_package([COMPOSE_PLUGIN_PACKAGE]):
        return InstallerResult.FAILURE, f"Unable to install {COMPOSE_PLUGIN_PACKAGE}"

    return InstallerResult.SUCCESS, "Docker and docker compose available"


def container_runtime_ready(record, platform, ctx) -> bool:
    return platform.is_docker_installed() and platform.is_docker_compose_installed()


def service_account_exists(record, platform, ctx) -> bool:
    err, _ = platform.run_process(["id", "-u", SERVICE_ACCOUNT_NAME], stderr=False)
    return err == 0


def create_service_account(record, platform, ctx) -> Tuple[InstallerResult, str]:
    ok, message = _run_all(
        platform,
        [
            ["useradd", "-m", "-s", SERVICE_ACCOUNT_SHELL, SERVICE_ACCOUNT_NAME],
            ["usermod", "-aG", "docker", SERVICE_ACCOUNT_NAME],
        ],
    )
    if not ok:
        return InstallerResult.FAILURE, message
    return InstallerResult.SUCCESS, f"Created user {SERVICE_ACCOUNT_NAME}"


def prepare_app_directory(record, platform, ctx) -> Tuple[InstallerResult, str]:
    user = operator_user()
    ok, message = _run_all(
        platform,
        [
            ["mkdir", "-p", record.install_path],
            ["chown", f"{user}:{user}", record.install_path],
        ],
    )
    if not ok:
        return InstallerResult.FAILURE, message
    return InstallerResult.SUCCESS, f"{record.install_path} owned by {user}"


def checkout_source(record, platform, ctx) -> Tuple[InstallerResult, str]:
    """Clone the compose repository into the (empty) install path, or update it."""
    if platform.path_exists(os.path.join(record.install_path, ".git")):
        command, done = ["git", "-C", record.install_path, "pull", "--ff-only"], "Repository updated"
    else:
        command, done = ["git", "clone", SOURCE_REPOSITORY_URL, record.install_path], "Repository cloned"
    err, out = platform.run_process(command, retry=2)
    if err != 0:
        return InstallerResult.FAILURE, f"{' '.join(command[:2])} failed: {' '.join(out[-3:])}"

    # git may have run as root under sudo
    user = operator_user()
    err, out = platform.run_process(["chown", "-R", f"{user}:{user}", record.install_path], privileged=True)
    if err != 0:
        return InstallerResult.FAILURE, f"Unable to hand {record.install_path} to {user}: {' '.join(out)}"
    return InstallerResult.SUCCESS, done


def registry_login(record, platform, ctx) -> Tuple[InstallerResult, str]:
    if not ctx.registry_password:
        return InstallerResult.FAILURE, f"No registry password supplied for {record.registry_username}"
    err, out = platform.run_process(
        ["docker", "login", "-u", record.registry_username, "--password-stdin"],
        privileged=True,
        stdin=ctx.registry_password,
    )
    if err != 0:
        return InstallerResult.FAILURE, f"Registry login as {record.registry_username} failed: {' '.join(out[-2:])}"
    return InstallerResult.SUCCESS, f"Logged in as {record.registry_username}"


###################################################################################################
def render_service_unit(record) -> str:
    compose = f"/usr/bin/docker compose -f {COMPOSE_FILE_NAME}"
    return "\n".join(
        [
            "[Unit]",
            "Description=ESC Django Application",
            "Requires=docker.service",
            "After=docker.service network-online.target",
            "",
            "[Service]",
            "Type=oneshot",
            "RemainAfterExit=yes",
            f"WorkingDirectory={record.install_path}",
            f"ExecStart={compose} up -d",
            f"ExecStop={compose} down",
            "TimeoutStartSec=0",
            "",
            "[Install]",
            "WantedBy=multi-user.target",
        ]
    ) + "\n"


def install_service_unit(record, platform, ctx) -> Tuple[InstallerResult, str]:
    if not platform.write_file(SYSTEMD_UNIT_PATH, render_service_unit(record), mode=0o644):
        return InstallerResult.FAILURE, f"Unable to write {SYSTEMD_UNIT_PATH}"
    ok, message = _run_all(
        platform,
        [
            ["systemctl", "daemon-reload"],
            ["systemctl", "enable", SYSTEMD_UNIT_NAME],
        ],
    )
    if not ok:
        return InstallerResult.FAILURE, message
    return InstallerResult.SUCCESS, f"{SYSTEMD_UNIT_NAME} enabled"


def configure_firewall(record, platform, ctx) -> Tuple[InstallerResult, str]:
    commands = [["ufw", "allow", f"{port}/tcp"] for port in FIREWALL_ALLOWED_TCP_PORTS]
    commands.append(["ufw", "--force", "enable"])
    ok, message = _run_all(platform, commands)
    if not ok:
        return InstallerResult.FAILURE, message
    return InstallerResult.SUCCESS, f"Allowing TCP {', '.join(str(p) for p in FIREWALL_ALLOWED_TCP_PORTS)}"


###################################################################################################
def running_services(record, platform) -> List[str]:
    err, out = platform.run_process(
        compose_command(record.install_path) + ["ps", "--services", "--filter", "status=running"],
        privileged=True,
        stderr=False,
        cwd=record.install_path,
    )
    return [line.strip() for line in out if line.strip()] if err == 0 else []


def wait_for_services(
    record,
    platform,
    services: Optional[List[str]] = None,
    attempts: int = READINESS_POLL_ATTEMPTS,
    interval_sec: float = READINESS_POLL_INTERVAL_SEC,
) -> bool:
    """Poll until every compose service is running (or any, if the service list is unknown)."""
    if services is None:
        services = GetComposeServiceNames(os.path.join(record.install_path, COMPOSE_FILE_NAME))
    for attempt in range(1, attempts + 1):
        running = running_services(record, platform)
        pending = [s for s in services if s not in running] if services else ([] if running else ["(any)"])
        if not pending:
            return True
        InstallerLogger.info(f"Waiting for services ({attempt}/{attempts}): {', '.join(pending)}")
        if attempt < attempts:
            time.sleep(interval_sec)
    return False


def launch_application(
    record,
    platform,
    services: Optional[List[str]] = None,
    interval_sec: float = READINESS_POLL_INTERVAL_SEC,
) -> bool:
    """Pull the application image, start the stack and wait for it to come up."""
    InstallerLogger.info(f"Pulling {APPLICATION_IMAGE}")
    if platform.run_process_streaming(["docker", "pull", APPLICATION_IMAGE], privileged=True) != 0:
        InstallerLogger.error(f"Pulling {APPLICATION_IMAGE} failed")
        return False

    compose = compose_command(record.install_path)
    err, out = platform.run_process(compose + ["up", "-d"], privileged=True, cwd=record.install_path)
    if err != 0:
        for line in out:
            InstallerLogger.error(line)
        return False

    ready = wait_for_services(record, platform, services=services, interval_sec=interval_sec)
    if ready:
        InstallerLogger.success("Application is running")
    else:
        InstallerLogger.warning("Not every service reported running yet; check the logs")
    platform.run_process_streaming(compose + ["ps"], privileged=True, cwd=record.install_path)
    return ready
