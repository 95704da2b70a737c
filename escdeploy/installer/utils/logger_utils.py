#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

import sys
from datetime import datetime
from typing import Optional

from colorama import init as ColoramaInit, Fore, Style

from escdeploy.installer.configs.constants.enums import InstallerResult

ColoramaInit()


class SkipReasons:
    """Centralized skip reason strings for consistent observability."""

    REUSE_MODE = "One-time setup skipped when reusing saved configuration"
    NOT_SELECTED = "Not selected for this deployment"
    ALREADY_DONE = "Already in place"


class InstallerLogger:
    """A static logger for provisioning steps with color-coded, simplified console output."""

    _console_output_enabled = True
    _main_log_file: Optional[str] = None
    _debug_enabled = False

    def __init__(self):
        """Constructor disabled - use static methods only."""
        raise NotImplementedError("InstallerLogger is entirely static. Use static methods directly.")

    @classmethod
    def set_console_output(cls, enabled: bool):
        cls._console_output_enabled = enabled

    @classmethod
    def set_log_file(cls, main_log_file: Optional[str]):
        """Set the main log file for all logging operations."""
        cls._main_log_file = main_log_file

    @classmethod
    def set_debug_enabled(cls, enabled: bool):
        """Enable or disable debug-level logging."""
        cls._debug_enabled = enabled

    @classmethod
    def generate_timestamped_filename(cls, base_name: str = "esc_deploy") -> str:
        """Generate a timestamped filename for logging."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return f"{base_name}_{timestamp}.log"

    @staticmethod
    def _log(label: str, color: str, message: str, file: object = sys.stdout):
        """Log a message to the console and, if configured, to the log file."""
        timestamp = f"[{InstallerLogger._timestamp()}]"

        if InstallerLogger._main_log_file:
            try:
                with open(InstallerLogger._main_log_file, "a", encoding="utf-8") as f:
                    f.write(f"{timestamp} ({label}) {message}\n")
            except OSError as e:
                print(f"{timestamp} {Fore.RED}(ERROR){Style.RESET_ALL} Unable to write log file: {e}", file=sys.stderr)
                InstallerLogger._main_log_file = None

        if InstallerLogger._console_output_enabled:
            print(f"{timestamp} {color}({label}){Style.RESET_ALL} {message}", file=file)

    @staticmethod
    def start(label: str):
        """Log the start of a given action."""
        InstallerLogger._log("START", Fore.BLUE, f"[{label}]")

    @staticmethod
    def end(label: str, status: InstallerResult, message: Optional[str] = None):
        """Log the end of a given action."""
        log_message = f"[{label}]"
        if message:
            log_message += f": {message}"

        if status == InstallerResult.SUCCESS:
            InstallerLogger._log("SUCCESS", Fore.GREEN, log_message)
        elif status == InstallerResult.SKIPPED:
            InstallerLogger._log("SKIP", Fore.MAGENTA, log_message)
        else:
            InstallerLogger._log("FAIL", Fore.RED, log_message, file=sys.stderr)

    @staticmethod
    def _timestamp() -> str:
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    @staticmethod
    def info(message: str):
        """Log a simple info message."""
        InstallerLogger._log("info", Fore.CYAN, message)

    @staticmethod
    def success(message: str):
        """Log a completed action that is not a provisioning step."""
        InstallerLogger._log("SUCCESS", Fore.GREEN, message)

    @staticmethod
    def warning(message: str):
        """Log a simple warning message."""
        InstallerLogger._log("WARNING", Fore.YELLOW, message, file=sys.stderr)

    @staticmethod
    def error(message: str):
        """Log a simple error message."""
        InstallerLogger._log("ERROR", Fore.RED, message, file=sys.stderr)

    @staticmethod
    def debug(message: str):
        """Log a debug message - only shown when debug is enabled."""
        if InstallerLogger._debug_enabled:
            InstallerLogger._log("DEBUG", Fore.CYAN, message)
