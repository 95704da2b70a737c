#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Unit tests for the generated helper commands and systemd unit."""

import os
import sys
import unittest

# Add the project root directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", "..", "..")))

from escdeploy.deploy_constants import SECURITY_DASHBOARD_PATH, SECURITY_UNBAN_PATH
from escdeploy.installer.actions.helper_scripts import APPLICATION_HELPERS, helper_paths, render_wrapper
from escdeploy.installer.actions.shared import compose_command, render_service_unit
from escdeploy.installer.configs.constants.enums import TlsMode
from escdeploy.installer.core.deploy_config import SettingsRecord


def make_record(security_enabled=True):
    return SettingsRecord(
        domain="example.com",
        registry_username="esc",
        install_path="/opt/apps/esc",
        tls_mode=TlsMode.NONE,
        security_enabled=security_enabled,
        security_contact_email="admin@example.com" if security_enabled else "",
    )


class TestHelperCommands(unittest.TestCase):
    def test_wrapper_execs_control_module(self):
        script = render_wrapper("/opt/apps/esc", "start", "Start the application")
        lines = script.splitlines()
        self.assertEqual(lines[0], "#!/bin/bash")
        self.assertEqual(lines[1], "# Start the application")
        self.assertTrue(lines[2].startswith("exec "))
        self.assertTrue(lines[2].endswith(' -m escdeploy.control --install-path /opt/apps/esc start "$@"'))

    def test_install_path_with_spaces_is_quoted(self):
        script = render_wrapper("/opt/my apps/esc", "stop", "Stop")
        self.assertIn("--install-path '/opt/my apps/esc' stop", script)

    def test_security_helpers_follow_profile(self):
        with_security = [path for path, _, _ in helper_paths(make_record(True))]
        without_security = [path for path, _, _ in helper_paths(make_record(False))]

        self.assertEqual(len(without_security), len(APPLICATION_HELPERS))
        self.assertIn("/opt/apps/esc/start.sh", without_security)
        self.assertNotIn(SECURITY_DASHBOARD_PATH, without_security)
        self.assertIn(SECURITY_DASHBOARD_PATH, with_security)
        self.assertIn(SECURITY_UNBAN_PATH, with_security)


class TestServiceUnit(unittest.TestCase):
    def test_unit_runs_compose_in_install_path(self):
        unit = render_service_unit(make_record())
        self.assertIn("WorkingDirectory=/opt/apps/esc", unit)
        self.assertIn("ExecStart=/usr/bin/docker compose -f compose.prod.yaml up -d", unit)
        self.assertIn("ExecStop=/usr/bin/docker compose -f compose.prod.yaml down", unit)
        self.assertIn("Requires=docker.service", unit)
        self.assertIn("WantedBy=multi-user.target", unit)

    def test_compose_command(self):
        self.assertEqual(
            compose_command("/opt/apps/esc"),
            ["docker", "compose", "-f", "/opt/apps/esc/compose.prod.yaml"],
        )


if __name__ == "__main__":
    unittest.main()
