#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Unit tests for the fail2ban documents and ban status parsing."""

import configparser
import os
import re
import sys
import unittest

# Add the project root directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", "..", "..")))

from escdeploy.deploy_constants import FAIL2BAN_CUSTOM_LOG, NGINX_ACCESS_LOG, NGINX_CDN_BLOCKED_LOG
from escdeploy.installer.actions.fail2ban import (
    filter_path,
    parse_banned_count,
    render_filter,
    render_jail_local,
    render_logrotate,
    watched_logs,
)
from escdeploy.installer.configs.constants.constants import FAIL2BAN_JAILS
from escdeploy.installer.configs.constants.enums import TlsMode
from escdeploy.installer.core.deploy_config import SettingsRecord

STATUS_OUTPUT = [
    "Status for the jail: nginx-scan",
    "|- Filter",
    "|  |- Currently failed:\t0",
    "|  |- Total failed:\t12",
    "|  `- File list:\t/var/log/nginx/esc_access.log",
    "`- Actions",
    "   |- Currently banned:\t4",
    "   |- Total banned:\t9",
    "   `- Banned IP list:\t198.51.100.1 198.51.100.2 198.51.100.3 198.51.100.4",
]


class TestJailLocal(unittest.TestCase):
    def setUp(self):
        record = SettingsRecord(
            domain="example.com",
            registry_username="esc",
            tls_mode=TlsMode.NONE,
            security_enabled=True,
            security_contact_email="admin@example.com",
        )
        # fail2ban reads jail.local with its own interpolation, so parse raw
        self.parser = configparser.RawConfigParser()
        self.parser.read_string(render_jail_local(record))

    def test_default_section(self):
        defaults = self.parser.defaults()
        self.assertEqual(defaults["destemail"], "admin@example.com")
        self.assertEqual(defaults["sender"], "fail2ban@example.com")
        self.assertEqual(defaults["bantime"], "2592000")
        self.assertEqual(defaults["action"], "%(action_mwl)s")

    def test_every_jail_enabled(self):
        self.assertEqual(self.parser.sections(), [jail.name for jail in FAIL2BAN_JAILS])
        for jail in FAIL2BAN_JAILS:
            section = self.parser[jail.name]
            self.assertEqual(section["enabled"], "true")
            self.assertEqual(section.get("logpath"), jail.logpath)
            self.assertEqual(int(section["maxretry"]), jail.policy.maxretry)

    def test_sshd_uses_stock_filter(self):
        self.assertFalse(self.parser.has_option("sshd", "filter"))
        self.assertEqual(self.parser["nginx-sqli"]["filter"], "nginx-sqli")

    def test_sshd_reads_the_journal(self):
        # Debian 12 has no /var/log/auth.log unless rsyslog is installed
        self.assertEqual(self.parser["sshd"]["backend"], "systemd")
        self.assertFalse(self.parser.has_option("sshd", "logpath"))
        self.assertFalse(self.parser.has_option("nginx-scan", "backend"))


class TestFilters(unittest.TestCase):
    def test_custom_filters(self):
        custom = [jail for jail in FAIL2BAN_JAILS if jail.failregex is not None]
        self.assertEqual(len(custom), len(FAIL2BAN_JAILS) - 1)
        for jail in custom:
            document = render_filter(jail)
            self.assertIn("[Definition]", document)
            self.assertIn("<HOST>", document)
            self.assertTrue(filter_path(jail).endswith(f"/{jail.name}.conf"))

    def test_logrotate(self):
        document = render_logrotate()
        self.assertTrue(document.startswith(f"{FAIL2BAN_CUSTOM_LOG} {{"))
        self.assertIn("    rotate 26", document)

    def test_cdn_bypass_jail_matches_blocked_requests(self):
        jail = next(j for j in FAIL2BAN_JAILS if j.name == "nginx-cloudflare-only")
        self.assertEqual(jail.logpath, NGINX_CDN_BLOCKED_LOG)
        pattern = re.compile(jail.failregex.replace("<HOST>", r"(?P<host>\S+)"))
        line = '203.0.113.7 - - [17/Oct/2026:10:00:00 +0000] "GET / HTTP/1.1" 403 153 "-" "curl/8.5.0"'
        match = pattern.search(line)
        self.assertIsNotNone(match)
        self.assertEqual(match.group("host"), "203.0.113.7")

    def test_watched_logs(self):
        self.assertEqual(watched_logs(), [NGINX_CDN_BLOCKED_LOG, NGINX_ACCESS_LOG])


class TestParseBannedCount(unittest.TestCase):
    def test_currently_banned(self):
        self.assertEqual(parse_banned_count(STATUS_OUTPUT), 4)

    def test_missing_figure(self):
        self.assertIsNone(parse_banned_count([]))
        self.assertIsNone(parse_banned_count(["Sorry but the jail 'nope' does not exist"]))


if __name__ == "__main__":
    unittest.main()
