#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Interactive deployment of the ESC application stack on a Debian or Ubuntu host."""

import argparse
import os
import sys

from escdeploy.deploy_constants import (
    COMPOSE_FILE_NAME,
    FAIL2BAN_CUSTOM_LOG,
    NGINX_SITE_PATH,
    SECURITY_DASHBOARD_PATH,
    SECURITY_UNBAN_PATH,
)
from escdeploy.installer.actions.helper_scripts import APPLICATION_HELPERS
from escdeploy.installer.actions.shared import launch_application
from escdeploy.installer.configs.constants.enums import InstallerResult, TlsMode
from escdeploy.installer.core.install_context import InstallContext
from escdeploy.installer.platforms import get_platform_installer
from escdeploy.installer.ui import TUIInstallerUI
from escdeploy.installer.utils.exceptions import DeployError, OperatorAbortError
from escdeploy.installer.utils.logger_utils import InstallerLogger
from escdeploy.installer.utils.settings_file_handler import SettingsFileHandler

QUESTION_START_NOW = "Start the application now?"


def build_arg_parser(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        '-d',
        '--debug',
        dest='debug',
        action='store_true',
        default=False,
        help="Show debug output",
    )
    parser.add_argument(
        '-l',
        '--log-to-file',
        dest='logToFile',
        nargs='?',
        const='',
        default=None,
        metavar='FILE',
        help="Also write the log to FILE (a timestamped name if omitted)",
    )


def completion_summary(record, ctx) -> str:
    scheme = "https" if record.tls_mode.has_certificate else "http"
    lines = [
        "",
        "Deployment complete",
        "===================",
        f"  Site:              {scheme}://{record.domain}",
        f"  Also served as:    {scheme}://www.{record.domain}",
        f"  Application:       {record.install_path}",
        f"  Environment file:  {record.env_file_path}",
        f"  Compose file:      {os.path.join(record.install_path, COMPOSE_FILE_NAME)}",
        f"  nginx site:        {NGINX_SITE_PATH}",
    ]
    if ctx.cert_paths is not None:
        lines.append(f"  Certificate:       {ctx.cert_paths.certificate}")
    elif record.tls_mode == TlsMode.NONE:
        lines.append("  TLS:               none (terminate TLS at the CDN)")
    lines.extend(["", "Helper commands:"])
    for name, (_, description) in APPLICATION_HELPERS.items():
        lines.append(f"  {os.path.join(record.install_path, name):<40} {description}")
    if record.security_enabled:
        lines.extend(
            [
                "",
                "Security:",
                f"  {SECURITY_DASHBOARD_PATH:<40} fail2ban dashboard",
                f"  {SECURITY_UNBAN_PATH + ' <IP>':<40} unban an address",
                f"  {'tail -f ' + FAIL2BAN_CUSTOM_LOG:<40} ban log",
            ]
        )
    return "\n".join(lines)


def main():
    parser = argparse.ArgumentParser(description="ESC deployment", conflict_handler="resolve")
    build_arg_parser(parser)
    parsed_args = parser.parse_args()

    if parsed_args.debug:
        InstallerLogger.set_debug_enabled(True)

    if parsed_args.logToFile is not None:
        log_filename = parsed_args.logToFile or InstallerLogger.generate_timestamped_filename()
        InstallerLogger.set_log_file(log_filename)
        InstallerLogger.info(f"Logging to file: {log_filename}")

    ui = TUIInstallerUI()

    InstallerLogger.start("Checking operating system")
    try:
        platform = get_platform_installer(ui, debug=parsed_args.debug)
    except NotImplementedError as e:
        InstallerLogger.end("Checking operating system", InstallerResult.FAILURE, str(e))
        sys.exit(1)
    InstallerLogger.end("Checking operating system", InstallerResult.SUCCESS, f"{platform.distro} {platform.release}")

    if os.geteuid() != 0 and platform.run_process_streaming(["sudo", "-v"]) != 0:
        InstallerLogger.error("This deployment needs sudo privileges")
        sys.exit(1)

    try:
        store = SettingsFileHandler()
        existing = store.load()

        ctx = InstallContext()
        record, _ = ui.gather_config(existing, ctx, install_path=store.install_path)

        outcome = platform.run_installation(record, ctx)
        InstallerLogger.debug(f"Applied: {outcome.applied}")
        InstallerLogger.debug(f"Skipped: {outcome.skipped}")
        if not outcome.ok:
            sys.exit(1)

        record = outcome.record
        saved_path = SettingsFileHandler(record.install_path).save(record)
        InstallerLogger.success(f"Configuration saved to {saved_path}")

        if ui.ask_yes_no(QUESTION_START_NOW, default=True):
            if not launch_application(record, platform):
                InstallerLogger.warning(f"Start it later with {os.path.join(record.install_path, 'start.sh')}")

        ui.display_message(completion_summary(record, ctx))

    except OperatorAbortError as e:
        InstallerLogger.warning(str(e) or "Cancelled")
        sys.exit(1)
    except KeyboardInterrupt:
        InstallerLogger.warning("Interrupted")
        sys.exit(1)
    except DeployError as e:
        InstallerLogger.error(str(e))
        sys.exit(1)


if __name__ == '__main__':
    main()
