#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Day-to-day control of a deployed ESC stack (called by the generated helper scripts)."""

import argparse
import logging
import os
import sys

from escdeploy.deploy_common import GetComposeServiceNames
from escdeploy.deploy_constants import (
    APPLICATION_IMAGE,
    COMPOSE_FILE_NAME,
    ENV_FILE_NAME,
    FAIL2BAN_CUSTOM_LOG,
    INTRUSION_PREVENTION_PACKAGE,
)
from escdeploy.deploy_utils import eprint, file_contents, get_verbosity_env_var_count, set_logging
from escdeploy.installer.actions.env_file import edit_env_file, report_validation, validate_env_document
from escdeploy.installer.actions.fail2ban import ban_counts, unban_address
from escdeploy.installer.actions.shared import compose_command
from escdeploy.installer.platforms.linux import LinuxInstaller
from escdeploy.installer.ui import TUIInstallerUI
from escdeploy.installer.utils.settings_file_handler import default_install_path

RECENT_BAN_LINES = 10


###################################################################################################
def compose_run(platform, install_path, *subcommand) -> int:
    return platform.run_process_streaming(
        compose_command(install_path) + list(subcommand),
        privileged=True,
        cwd=install_path,
    )


def cmd_start(platform, args) -> int:
    return compose_run(platform, args.installPath, "up", "-d")


def cmd_stop(platform, args) -> int:
    return compose_run(platform, args.installPath, "down")


def cmd_logs(platform, args) -> int:
    services = GetComposeServiceNames(os.path.join(args.installPath, COMPOSE_FILE_NAME))
    if args.service and services and args.service not in services:
        eprint(f"Unknown service '{args.service}' (choose from: {', '.join(services)})")
        return 2
    selected = [args.service] if args.service else []
    return compose_run(platform, args.installPath, "logs", "-f", "--tail=100", *selected)


def cmd_status(platform, args) -> int:
    result = compose_run(platform, args.installPath, "ps")
    print()
    platform.run_process_streaming(["docker", "stats", "--no-stream"], privileged=True)
    return result


def cmd_deploy(platform, args) -> int:
    logging.info(f"Pulling {APPLICATION_IMAGE}")
    for command in (
        lambda: platform.run_process_streaming(["docker", "pull", APPLICATION_IMAGE], privileged=True),
        lambda: compose_run(platform, args.installPath, "down"),
        lambda: compose_run(platform, args.installPath, "up", "-d"),
    ):
        result = command()
        if result != 0:
            return result
    return compose_run(platform, args.installPath, "ps")


def cmd_edit_env(platform, args) -> int:
    path = os.path.join(args.installPath, ENV_FILE_NAME)
    result = validate_env_document(edit_env_file(platform, path))
    report_validation(result)
    if not result.ok:
        return 1
    if platform.ui.ask_yes_no("Restart the application to apply the changes?", default=True):
        return cmd_deploy_restart(platform, args)
    return 0


def cmd_deploy_restart(platform, args) -> int:
    result = compose_run(platform, args.installPath, "down")
    return result if result != 0 else compose_run(platform, args.installPath, "up", "-d")


def print_ban_counts(platform) -> None:
    for jail, count in ban_counts(platform).items():
        print(f"  {jail:<24} {'not running' if count is None else f'{count} banned'}")


def cmd_security(platform, args) -> int:
    err, out = platform.run_process(["systemctl", "is-active", INTRUSION_PREVENTION_PACKAGE], stderr=False)
    print(f"fail2ban: {out[0] if out else 'unknown'}")
    print_ban_counts(platform)
    print()
    platform.run_process_streaming(["ufw", "status", "verbose"], privileged=True)
    return 0 if err == 0 else 1


def cmd_dashboard(platform, args) -> int:
    err, out = platform.run_process(["systemctl", "is-active", INTRUSION_PREVENTION_PACKAGE], stderr=False)
    print("Fail2Ban security dashboard")
    print(f"Status: {out[0] if out else 'unknown'}")
    print()
    print("Per-jail statistics")
    print_ban_counts(platform)
    print()
    print(f"Recent bans ({FAIL2BAN_CUSTOM_LOG})")
    contents = file_contents(FAIL2BAN_CUSTOM_LOG) or ""
    recent = [line for line in contents.splitlines() if "BAN" in line][-RECENT_BAN_LINES:]
    for line in recent or ["No recent bans"]:
        print(f"  {line}")
    return 0 if err == 0 else 1


def cmd_unban(platform, args) -> int:
    jails = unban_address(platform, args.address)
    for jail in jails:
        print(f"Unbanned {args.address} from {jail}")
    if not jails:
        print(f"{args.address} was not banned")
    return 0


COMMANDS = {
    "start": (cmd_start, "Start the application"),
    "stop": (cmd_stop, "Stop the application"),
    "logs": (cmd_logs, "Follow the application logs"),
    "status": (cmd_status, "Show container status and resource usage"),
    "deploy": (cmd_deploy, "Pull the latest image and restart the application"),
    "edit-env": (cmd_edit_env, "Edit and validate the environment file"),
    "security": (cmd_security, "Show fail2ban and firewall status"),
    "dashboard": (cmd_dashboard, "Show the fail2ban dashboard"),
    "unban": (cmd_unban, "Unban an address from every fail2ban jail"),
}


###################################################################################################
def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='ESC control script', add_help=True)
    parser.add_argument(
        '--verbose',
        '-v',
        action='count',
        default=get_verbosity_env_var_count("VERBOSITY"),
        help='Increase verbosity (e.g., -v, -vv, etc.)',
    )
    parser.add_argument(
        '--install-path',
        dest='installPath',
        metavar='<string>',
        type=str,
        default=default_install_path(),
        help='Application directory',
    )
    subparsers = parser.add_subparsers(dest='command', metavar='<command>')
    subparsers.required = True
    for name, (_, description) in COMMANDS.items():
        subparser = subparsers.add_parser(name, help=description)
        if name == "logs":
            subparser.add_argument('service', nargs='?', default=None, help='Only this compose service')
        elif name == "unban":
            subparser.add_argument('address', help='IP address to unban')
    return parser


def main():
    args = build_arg_parser().parse_args()
    args.verbose = set_logging(
        os.getenv("LOGLEVEL", ""),
        args.verbose,
        set_traceback_limit=True,
    )
    logging.debug(f"Arguments: {sys.argv[1:]}")
    logging.debug(f"Arguments: {args}")

    platform = LinuxInstaller(TUIInstallerUI())
    handler, _ = COMMANDS[args.command]
    try:
        sys.exit(handler(platform, args))
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == '__main__':
    main()
