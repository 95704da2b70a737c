#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""
fail2ban jails and filters for the security profile, plus the ban queries
used by the operator helper commands.
"""

import os
import re
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from escdeploy.deploy_constants import (
    FAIL2BAN_CUSTOM_LOG,
    FAIL2BAN_FILTER_DIR,
    FAIL2BAN_JAIL_PATH,
    FAIL2BAN_LOGROTATE_PATH,
    INTRUSION_PREVENTION_JOURNAL_PACKAGE,
    INTRUSION_PREVENTION_PACKAGE,
)
from escdeploy.installer.configs.constants.constants import (
    FAIL2BAN_DEFAULT_ACTION,
    FAIL2BAN_DEFAULT_POLICY,
    FAIL2BAN_JAILS,
    FAIL2BAN_LOGROTATE_POLICY,
    FAIL2BAN_SENDER_NAME,
    Jail,
)
from escdeploy.installer.configs.constants.enums import InstallerResult
from escdeploy.installer.utils.logger_utils import InstallerLogger

_CURRENTLY_BANNED_RE = re.compile(r"Currently banned:\s*(\d+)")


def render_jail_local(record) -> str:
    policy = FAIL2BAN_DEFAULT_POLICY
    lines = [
        f"# fail2ban jails for {record.domain}",
        "# generated by esc-deploy and replaced on every deployment",
        "",
        "[DEFAULT]",
        f"bantime = {policy.bantime}",
        f"findtime = {policy.findtime}",
        f"maxretry = {policy.maxretry}",
        "ignoreip = 127.0.0.1/8 ::1",
        f"destemail = {record.security_contact_email}",
        f"sender = fail2ban@{record.domain}",
        f"sendername = {FAIL2BAN_SENDER_NAME}",
        "mta = sendmail",
        f"action = {FAIL2BAN_DEFAULT_ACTION}",
    ]
    for jail in FAIL2BAN_JAILS:
        lines.extend(
            [
                "",
                f"[{jail.name}]",
                "enabled = true",
                f"port = {jail.port}",
            ]
        )
        if jail.failregex is not None:
            lines.append(f"filter = {jail.name}")
        if jail.logpath is None:
            lines.append("backend = systemd")
        else:
            lines.append(f"logpath = {jail.logpath}")
        lines.extend(
            [
                f"maxretry = {jail.policy.maxretry}",
                f"bantime = {jail.policy.bantime}",
                f"findtime = {jail.policy.findtime}",
            ]
        )
    return "\n".join(lines) + "\n"


def render_filter(jail: Jail) -> str:
    return "\n".join(
        [
            f"# {jail.name}",
            "[Definition]",
            f"failregex = {jail.failregex}",
            "ignoreregex =",
        ]
    ) + "\n"


def filter_path(jail: Jail) -> str:
    return os.path.join(FAIL2BAN_FILTER_DIR, f"{jail.name}.conf")


def render_logrotate() -> str:
    body = "\n".join(f"    {directive}" for directive in FAIL2BAN_LOGROTATE_POLICY)
    return f"{FAIL2BAN_CUSTOM_LOG} {{\n{body}\n}}\n"


def watched_logs() -> List[str]:
    """The log files the jails read, in jail order and without repeats."""
    logs = []
    for jail in FAIL2BAN_JAILS:
        if jail.logpath is not None and jail.logpath not in logs:
            logs.append(jail.logpath)
    return logs


def configure_intrusion_prevention(record, platform, ctx) -> Tuple[InstallerResult, str]:
    """Install fail2ban, write its configuration and make sure it is running."""
    packages = [INTRUSION_PREVENTION_PACKAGE, INTRUSION_PREVENTION_JOURNAL_PACKAGE]
    if not platform.install_package(packages):
        return InstallerResult.FAILURE, f"Unable to install {' '.join(packages)}"

    files = [(FAIL2BAN_JAIL_PATH, render_jail_local(record)), (FAIL2BAN_LOGROTATE_PATH, render_logrotate())]
    files.extend((filter_path(jail), render_filter(jail)) for jail in FAIL2BAN_JAILS if jail.failregex is not None)
    for path, contents in files:
        if not platform.write_file(path, contents, mode=0o644):
            return InstallerResult.FAILURE, f"Unable to write {path}"

    # fail2ban refuses to start a jail whose log file does not exist yet
    logs = watched_logs()
    commands = [["mkdir", "-p", directory] for directory in sorted({os.path.dirname(log) for log in logs})]
    commands.extend(
        [
            ["touch"] + logs + [FAIL2BAN_CUSTOM_LOG],
            ["chmod", "640", FAIL2BAN_CUSTOM_LOG],
            ["systemctl", "enable", INTRUSION_PREVENTION_PACKAGE],
            ["systemctl", "restart", INTRUSION_PREVENTION_PACKAGE],
        ]
    )
    for command in commands:
        err, out = platform.run_process(command, privileged=True)
        if err != 0:
            return InstallerResult.FAILURE, f"{' '.join(command)} failed: {' '.join(out)}"

    err, out = platform.run_process(
        ["systemctl", "is-active", INTRUSION_PREVENTION_PACKAGE], privileged=True, retry=3, retry_sleep_sec=2
    )
    if err != 0:
        _, status = platform.run_process(
            ["systemctl", "status", "--no-pager", INTRUSION_PREVENTION_PACKAGE], privileged=True
        )
        for line in status:
            InstallerLogger.error(line)
        return InstallerResult.FAILURE, f"{INTRUSION_PREVENTION_PACKAGE} is not running"

    return InstallerResult.SUCCESS, f"{len(FAIL2BAN_JAILS)} jails active"


def parse_banned_count(status_lines: List[str]) -> Optional[int]:
    """The "Currently banned" figure from `fail2ban-client status <jail>` output."""
    for line in status_lines:
        match = _CURRENTLY_BANNED_RE.search(line)
        if match:
            return int(match.group(1))
    return None


def ban_counts(platform) -> Dict[str, Optional[int]]:
    """Currently banned addresses per jail (None for a jail fail2ban does not know)."""
    counts = {}
    for jail in FAIL2BAN_JAILS:
        err, out = platform.run_process(["fail2ban-client", "status", jail.name], privileged=True, stderr=False)
        counts[jail.name] = parse_banned_count(out) if err == 0 else None
    return counts


def unban_address(platform, address: str) -> List[str]:
    """Remove an address from every jail, log the unban, and return the jails it was removed from."""
    unbanned = []
    for jail in FAIL2BAN_JAILS:
        err, _ = platform.run_process(
            ["fail2ban-client", "set", jail.name, "unbanip", address], privileged=True, stderr=False
        )
        if err == 0:
            unbanned.append(jail.name)

    entry = f"[{datetime.now().strftime('%Y-%m-%d %H:%M:%S')}] MANUAL UNBAN: {address}\n"
    err, out = platform.run_process(["tee", "-a", FAIL2BAN_CUSTOM_LOG], privileged=True, stdin=entry)
    if err != 0:
        InstallerLogger.warning(f"Unable to record unban in {FAIL2BAN_CUSTOM_LOG}: {' '.join(out)}")
    return unbanned
