#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""Unit test for the saved settings file: write, read back, permissions.

The settings file is the only state carried between deployments, so a
record saved and loaded again must come back unchanged, and the file must
never be readable by anyone but its owner.
"""

import os
import shutil
import stat
import sys
import tempfile
import unittest
from unittest.mock import patch

# Add the project root directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", "..", "..")))

from escdeploy.deploy_constants import DEFAULT_INSTALL_PATH, SETTINGS_FILE_NAME
from escdeploy.installer.configs.constants.enums import TlsMode
from escdeploy.installer.core.deploy_config import SettingsRecord
from escdeploy.installer.utils.logger_utils import InstallerLogger
from escdeploy.installer.utils.settings_file_handler import SettingsFileHandler, default_install_path


class TestSettingsFileRoundtrip(unittest.TestCase):
    def setUp(self):
        InstallerLogger.set_console_output(False)
        self.temp_dir = tempfile.mkdtemp()
        self.install_path = os.path.join(self.temp_dir, "esc")

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def record(self, **overrides):
        values = dict(
            domain="example.com",
            registry_username="esc",
            install_path=self.install_path,
            tls_mode=TlsMode.ISSUED,
            tls_contact_email="ops@example.com",
            security_enabled=True,
            security_contact_email="admin@example.com",
        )
        values.update(overrides)
        return SettingsRecord(**values)

    def test_roundtrip(self):
        for record in (
            self.record(),
            self.record(tls_mode=TlsMode.SELF_SIGNED, tls_contact_email=""),
            self.record(tls_mode=TlsMode.NONE, tls_contact_email="", security_enabled=False, security_contact_email=""),
        ):
            with self.subTest(tls_mode=record.tls_mode):
                SettingsFileHandler(self.install_path).save(record)
                self.assertEqual(SettingsFileHandler(self.install_path).load(), record)

    def test_file_is_owner_only(self):
        path = SettingsFileHandler(self.install_path).save(self.record())
        self.assertEqual(path, os.path.join(self.install_path, SETTINGS_FILE_NAME))
        self.assertEqual(stat.S_IMODE(os.stat(path).st_mode), 0o600)

    def test_save_replaces_previous_file(self):
        handler = SettingsFileHandler(self.install_path)
        handler.save(self.record())
        handler.save(self.record(domain="new.example.org"))

        self.assertEqual(handler.load().domain, "new.example.org")
        # no temporary files left beside it
        self.assertEqual(os.listdir(self.install_path), [SETTINGS_FILE_NAME])

    def test_stored_variable_names(self):
        rendered = SettingsFileHandler.render(self.record())
        for line in (
            'DOMAIN_NAME="example.com"',
            'DOCKER_USERNAME="esc"',
            f'APP_DIR="{self.install_path}"',
            'SETUP_SSL="letsencrypt"',
            'SSL_EMAIL="ops@example.com"',
            'SECURITY_ENABLED="true"',
            'ADMIN_EMAIL="admin@example.com"',
        ):
            self.assertIn(line, rendered.splitlines())

    def test_missing_file_loads_nothing(self):
        self.assertIsNone(SettingsFileHandler(self.install_path).load())

    def test_unknown_tls_mode_loads_as_none(self):
        os.makedirs(self.install_path)
        with open(os.path.join(self.install_path, SETTINGS_FILE_NAME), "w") as f:
            f.write('DOMAIN_NAME="example.com"\nDOCKER_USERNAME="esc"\nSETUP_SSL="bogus"\n')

        record = SettingsFileHandler(self.install_path).load()

        self.assertEqual(record.tls_mode, TlsMode.NONE)
        self.assertEqual(record.install_path, self.install_path)
        self.assertFalse(record.security_enabled)

    def test_default_install_path_from_environment(self):
        with patch.dict(os.environ, {"APP_DIR": "/srv/esc"}):
            self.assertEqual(default_install_path(), "/srv/esc")
        with patch.dict(os.environ, {"APP_DIR": ""}):
            self.assertEqual(default_install_path(), DEFAULT_INSTALL_PATH)


if __name__ == "__main__":
    unittest.main()
