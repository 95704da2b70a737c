#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Base installer class for platform-specific provisioners."""

import abc
import os
import subprocess
import tempfile
import time
from typing import List, Optional, Tuple

from escdeploy.deploy_constants import DEFAULT_EDITOR, EDITOR_ENV_VAR
from escdeploy.deploy_utils import file_contents, flatten, get_iterable
from escdeploy.installer.core.steps import ProvisionOutcome
from escdeploy.installer.utils.exceptions import StepFailedError
from escdeploy.installer.utils.logger_utils import InstallerLogger


class BaseInstaller(abc.ABC):
    """Abstract base class for platform-specific provisioners.

    All system changes go through run_process() and write_file() so that a
    mock platform can record them instead.
    """

    def __init__(self, ui, debug: bool = False):
        """Initialize the base installer.

        Args:
            ui: User interface implementation for operator interactions
            debug: Enable debug output
        """
        self.ui = ui
        self.debug = debug

    @abc.abstractmethod
    def install(self, record, ctx):
        """Execute the full ordered provisioning sequence for this platform.

        Returns the effective SettingsRecord (TLS may have been downgraded)
        and raises StepFailedError on the first failing step.
        """
        raise NotImplementedError

    def run_installation(self, record, ctx) -> ProvisionOutcome:
        """Provision the host and report what was applied, skipped, and where it stopped.

        Only OperatorAbortError propagates; a failing step is reported in the
        outcome's error.
        """
        error = None
        try:
            effective = self.install(record, ctx)
        except StepFailedError as e:
            InstallerLogger.error(str(e))
            effective = record.without_tls() if ctx.tls_fallback else record
            error = e
        return ProvisionOutcome(
            record=effective,
            applied=ctx.applied_steps,
            skipped=ctx.skipped_steps,
            error=error,
        )

    @abc.abstractmethod
    def install_docker(self) -> bool:
        """Install Docker/container runtime on this platform

        Returns:
            True if successful, False otherwise
        """
        pass

    @abc.abstractmethod
    def install_dependencies(self) -> bool:
        """Install the baseline system packages.

        Returns:
            True if successful, False otherwise
        """
        pass

    def run_process(
        self,
        command: List[str],
        privileged: bool = False,
        stdin: Optional[str] = None,
        retry: int = 0,
        retry_sleep_sec: int = 5,
        stderr: bool = True,
        cwd: Optional[str] = None,
    ) -> Tuple[int, List[str]]:
        """Run a system process with optional privilege escalation."""
        flat_command = list(flatten(get_iterable(command)))
        if privileged and os.geteuid() != 0:
            flat_command = ["sudo"] + flat_command

        retcode = -1
        output = []

        for i in range(retry + 1):
            output = []
            try:
                process = subprocess.run(
                    flat_command,
                    input=stdin if stdin else None,
                    capture_output=True,
                    check=False,
                    text=True,
                    errors="ignore",
                    cwd=cwd,
                )
                retcode = process.returncode
                if process.stdout:
                    output.extend(process.stdout.splitlines())
                if stderr and process.stderr:
                    output.extend(process.stderr.splitlines())
            except FileNotFoundError:
                output = [f"Command {' '.join(flat_command)} not found or unable to execute"]
                retcode = 127
                break
            except OSError as e:
                output = [f"Error executing command {' '.join(flat_command)}: {e}"]
                retcode = 1

            if retcode == 0:
                break
            if i < retry:
                InstallerLogger.warning(
                    f"Command failed (attempt {i+1}/{retry+1}). Retrying in {retry_sleep_sec} seconds..."
                )
                time.sleep(retry_sleep_sec)

        # the registry password is passed on stdin and must never be logged
        InstallerLogger.debug(f"Command {' '.join(flat_command)} returned {retcode}: {output}")

        return retcode, output

    def run_process_streaming(
        self,
        command: List[str],
        privileged: bool = False,
        cwd: Optional[str] = None,
    ) -> int:
        """Run a system process attached to the terminal (editors, log tails, long pulls)."""
        flat_command = list(flatten(get_iterable(command)))
        if privileged and os.geteuid() != 0:
            flat_command = ["sudo"] + flat_command

        InstallerLogger.debug(f"Running streaming command: {' '.join(flat_command)}")

        try:
            result = subprocess.run(flat_command, check=False, text=True, cwd=cwd)
            return result.returncode
        except FileNotFoundError:
            InstallerLogger.error(f"Command not found: {' '.join(flat_command)}")
            return 127
        except OSError as e:
            InstallerLogger.error(f"Error executing command {' '.join(flat_command)}: {e}")
            return 1

    def path_exists(self, path: str) -> bool:
        return os.path.exists(path)

    def privileged_path_exists(self, path: str) -> bool:
        """Like path_exists, but for paths under root-only directories (e.g. /etc/letsencrypt/live)."""
        err, _ = self.run_process(["test", "-e", path], privileged=True, stderr=False)
        return err == 0

    def read_file(self, path: str) -> Optional[str]:
        return file_contents(path)

    def write_file(self, path: str, contents: str, mode: int = 0o644, privileged: bool = True) -> bool:
        """Write a whole file by installing a temporary copy over the destination."""
        tmp_path = None
        try:
            with tempfile.NamedTemporaryFile(mode="w", encoding="utf-8", delete=False) as tmp:
                tmp.write(contents)
                tmp_path = tmp.name
            err, out = self.run_process(
                ["install", "-D", "-m", f"{mode:04o}", tmp_path, path],
                privileged=privileged,
            )
            if err != 0:
                InstallerLogger.error(f"Failed to write {path}: {' '.join(out)}")
            return err == 0
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)

    def open_editor(self, path: str) -> int:
        """Hand the terminal to the operator's editor until they exit it."""
        editor = os.getenv(EDITOR_ENV_VAR, "").strip() or DEFAULT_EDITOR
        return self.run_process_streaming(editor.split() + [path])

    def package_is_installed(self, package_name: str) -> bool:
        """Check if a package is installed."""
        return False

    def install_package(self, packages: List[str]) -> bool:
        """Install packages using platform package manager."""
        return False

    def is_docker_installed(self) -> bool:
        """Return True if Docker CLI and daemon are accessible."""
        err, _ = self.run_process(["docker", "info"], stderr=False)
        return err == 0

    def is_docker_compose_installed(self) -> bool:
        err, _ = self.run_process(["docker", "compose", "version"], stderr=False)
        return err == 0
