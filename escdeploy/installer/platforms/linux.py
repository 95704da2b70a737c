#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Debian/Ubuntu provisioner for the ESC stack."""

import os
from typing import List

import requests

from escdeploy.deploy_common import DownloadToFile, GetOsRelease
from escdeploy.deploy_constants import (
    BASELINE_PACKAGES,
    DOCKER_INSTALL_SCRIPT_URL,
    PLATFORM_LINUX,
)
from escdeploy.deploy_utils import temporary_filename
from escdeploy.installer.actions import env_file, fail2ban, helper_scripts, nginx, shared, tls
from escdeploy.installer.core.steps import ProvisionStep, run_steps
from escdeploy.installer.utils.logger_utils import InstallerLogger

from .base import BaseInstaller


def build_provision_steps() -> List[ProvisionStep]:
    """The provisioning sequence, in execution order."""
    return [
        ProvisionStep(
            "system_packages",
            "System packages",
            shared.install_system_packages,
            one_time=True,
        ),
        ProvisionStep(
            "container_runtime",
            "Docker",
            shared.install_container_runtime,
            verify=shared.container_runtime_ready,
        ),
        ProvisionStep(
            "service_account",
            "Deployment user",
            shared.create_service_account,
            one_time=True,
            enabled=lambda record, ctx: ctx.create_service_user,
            is_done=shared.service_account_exists,
        ),
        ProvisionStep("app_directory", "Application directory", shared.prepare_app_directory),
        ProvisionStep("source_checkout", "Application repository", shared.checkout_source),
        ProvisionStep("registry_login", "Docker Hub login", shared.registry_login),
        ProvisionStep("environment_file", "Environment file", env_file.configure_environment_file),
        ProvisionStep(
            "intrusion_prevention",
            "Fail2Ban",
            fail2ban.configure_intrusion_prevention,
            enabled=lambda record, ctx: record.security_enabled,
        ),
        ProvisionStep(
            "reverse_proxy_package",
            "nginx package",
            nginx.install_reverse_proxy,
            is_done=nginx.reverse_proxy_installed,
        ),
        ProvisionStep("tls_certificate", "TLS certificate", tls.ensure_tls_certificate),
        ProvisionStep(
            "reverse_proxy_config",
            "nginx configuration",
            nginx.configure_reverse_proxy,
            verify=nginx.reverse_proxy_active,
        ),
        ProvisionStep("service_unit", "systemd service", shared.install_service_unit),
        ProvisionStep(
            "firewall",
            "Firewall",
            shared.configure_firewall,
            one_time=True,
            enabled=lambda record, ctx: ctx.configure_firewall,
        ),
        ProvisionStep("helper_commands", "Helper commands", helper_scripts.write_helper_commands),
    ]


ONE_TIME_STEP_NAMES = [step.name for step in build_provision_steps() if step.one_time]


class LinuxInstaller(BaseInstaller):
    """Debian/Ubuntu provisioner using apt and the Docker convenience script."""

    def __init__(self, ui, debug: bool = False):
        super().__init__(ui, debug)

        os_release = GetOsRelease()
        self.distro = os_release.get("ID", "").lower()
        self.codename = os_release.get("VERSION_CODENAME", "")
        self.release = os_release.get("VERSION_ID", "")

        self.check_package_cmd = ["dpkg", "-s"]
        self.install_package_cmd = ["apt-get", "install", "-y", "-qq"]
        self.update_repo_cmd = ["apt-get", "update", "-qq"]
        self.upgrade_cmd = ["apt-get", "upgrade", "-y", "-qq"]
        os.environ["DEBIAN_FRONTEND"] = "noninteractive"

        InstallerLogger.debug(f"{PLATFORM_LINUX} installer initialized for {self.distro} {self.codename} {self.release}")

    def install_dependencies(self) -> bool:
        """Refresh and upgrade the system, then install the baseline packages."""
        for command in (self.update_repo_cmd, self.upgrade_cmd):
            err, out = self.run_process(command, privileged=True, retry=2)
            if err != 0:
                InstallerLogger.error(f"{' '.join(command)} failed: {out[-3:]}")
                return False
        return self.install_package(BASELINE_PACKAGES)

    def package_is_installed(self, package_name: str) -> bool:
        err, _ = self.run_process(self.check_package_cmd + [package_name], stderr=False)
        return err == 0

    def install_package(self, packages: List[str]) -> bool:
        packages_to_install = [p for p in packages if not self.package_is_installed(p)]
        if not packages_to_install:
            InstallerLogger.debug(f"All packages already installed: {packages}")
            return True

        err, out = self.run_process(self.update_repo_cmd, privileged=True, retry=2)
        if err != 0:
            InstallerLogger.warning(f"Failed to update package lists: {out[-3:]}")

        err, out = self.run_process(self.install_package_cmd + packages_to_install, privileged=True)
        if err != 0:
            InstallerLogger.error(f"Failed to install packages {packages_to_install}: {out[-3:]}")
            return False

        InstallerLogger.info(f"Installed packages: {', '.join(packages_to_install)}")
        return True

    def install_docker(self) -> bool:
        """Install Docker using the convenience script from get.docker.com."""
        try:
            with temporary_filename('.sh') as temp_filename:
                if not DownloadToFile(DOCKER_INSTALL_SCRIPT_URL, temp_filename, self.debug):
                    InstallerLogger.error(f"Downloading {DOCKER_INSTALL_SCRIPT_URL} failed")
                    return False
                os.chmod(temp_filename, 0o755)
                err, out = self.run_process(["sh", temp_filename], privileged=True)
                if err != 0:
                    InstallerLogger.error(f"Docker installation via convenience script failed: {out[-3:]}")
                    return False
        except (requests.RequestException, OSError) as e:
            InstallerLogger.error(f"Failed to download or execute Docker convenience script: {e}")
            return False

        InstallerLogger.info("Docker installation via convenience script succeeded")
        for action in ("start", "enable"):
            err, out = self.run_process(["systemctl", action, "docker"], privileged=True)
            if err != 0:
                InstallerLogger.error(f"{action.capitalize()} of the Docker service failed: {out}")
                return False
        return True

    def install(self, record, ctx):
        """Run every provisioning step in order.

        Order:
          1) system packages (one-time)      8) fail2ban (security profile)
          2) docker + compose                9) nginx package
          3) deployment user (one-time)     10) TLS certificate
          4) application directory          11) nginx site
          5) repository clone/pull          12) systemd unit
          6) registry login                 13) firewall (one-time)
          7) environment file               14) helper commands
        """
        return run_steps(build_provision_steps(), record, self, ctx)
