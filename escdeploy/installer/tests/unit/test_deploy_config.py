#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Unit tests for ConfigItem, field validators, DeployConfig and TlsMode."""

import os
import sys
import unittest

# Add the project root directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", "..", "..")))

from escdeploy.installer.configs.constants.configuration_item_keys import (
    KEY_CONFIG_ITEM_DOMAIN_NAME,
    KEY_CONFIG_ITEM_INSTALL_PATH,
    KEY_CONFIG_ITEM_REGISTRY_USERNAME,
    KEY_CONFIG_ITEM_SECURITY_CONTACT_EMAIL,
    KEY_CONFIG_ITEM_SECURITY_ENABLED,
    KEY_CONFIG_ITEM_TLS_CONTACT_EMAIL,
    KEY_CONFIG_ITEM_TLS_MODE,
)
from escdeploy.installer.configs.constants.enums import TlsMode
from escdeploy.installer.core.config_item import ConfigItem
from escdeploy.installer.core.deploy_config import DeployConfig, SettingsRecord
from escdeploy.installer.core.validation import (
    validate_domain_name,
    validate_email,
    validate_install_path,
    validate_optional_email,
)
from escdeploy.installer.utils.exceptions import (
    ConfigItemNotFoundError,
    ConfigValueValidationError,
    DeployConfigError,
)


class TestConfigItem(unittest.TestCase):
    def test_blank_rejected_unless_accepted(self):
        item = ConfigItem(key="k", label="Thing", default_value="x")
        ok, error = item.set_value("  ")
        self.assertFalse(ok)
        self.assertIn("Thing", error)
        self.assertEqual(item.get_value(), "x")
        self.assertFalse(item.is_modified)

        blank_ok = ConfigItem(key="k", label="Thing", accept_blank=True)
        self.assertEqual(blank_ok.set_value(""), (True, ""))

    def test_bool_validator_result(self):
        item = ConfigItem(key="k", label="Flag", default_value=False, validator=lambda x: isinstance(x, bool))
        self.assertEqual(item.set_value("yes"), (False, "Invalid value"))
        self.assertEqual(item.set_value(True), (True, ""))
        self.assertTrue(item.is_modified)

    def test_callable_question(self):
        item = ConfigItem(key="k", label="Q", question=lambda: "computed?")
        self.assertEqual(item.question, "computed?")

    def test_reset(self):
        item = ConfigItem(key="k", label="Q", default_value="a")
        item.set_value("b")
        item.reset()
        self.assertEqual(item.get_value(), "a")
        self.assertFalse(item.is_modified)


class TestFieldValidators(unittest.TestCase):
    def test_domain_names(self):
        for good in ("example.com", "www.example.co.ke", "localhost", "a-b.example.org"):
            self.assertTrue(validate_domain_name(good)[0], good)
        for bad in ("", "   ", "-bad.com", "bad-.com", "has space.com", "under_score.com", "a..b"):
            self.assertFalse(validate_domain_name(bad)[0], bad)

    def test_emails(self):
        self.assertTrue(validate_email("ops@example.com")[0])
        self.assertFalse(validate_email("ops@example")[0])
        self.assertFalse(validate_email("")[0])
        self.assertTrue(validate_optional_email("")[0])
        self.assertFalse(validate_optional_email("nope")[0])

    def test_install_path_must_be_absolute(self):
        self.assertTrue(validate_install_path("/opt/apps/esc")[0])
        self.assertFalse(validate_install_path("apps/esc")[0])


class TestTlsMode(unittest.TestCase):
    def test_parse_stored_values_and_aliases(self):
        self.assertEqual(TlsMode.parse("letsencrypt"), TlsMode.ISSUED)
        self.assertEqual(TlsMode.parse("Self-Signed"), TlsMode.SELF_SIGNED)
        self.assertEqual(TlsMode.parse("3"), TlsMode.NONE)
        self.assertEqual(TlsMode.parse(""), TlsMode.NONE)
        self.assertEqual(TlsMode.parse(TlsMode.ISSUED), TlsMode.ISSUED)
        with self.assertRaises(ValueError):
            TlsMode.parse("acme")

    def test_has_certificate(self):
        self.assertTrue(TlsMode.ISSUED.has_certificate)
        self.assertTrue(TlsMode.SELF_SIGNED.has_certificate)
        self.assertFalse(TlsMode.NONE.has_certificate)


class TestDeployConfig(unittest.TestCase):
    def fill(self, config, **overrides):
        values = {
            KEY_CONFIG_ITEM_DOMAIN_NAME: "example.com",
            KEY_CONFIG_ITEM_REGISTRY_USERNAME: "esc",
            KEY_CONFIG_ITEM_INSTALL_PATH: "/opt/apps/esc",
            KEY_CONFIG_ITEM_TLS_MODE: "none",
            KEY_CONFIG_ITEM_SECURITY_ENABLED: False,
        }
        values.update(overrides)
        for key, value in values.items():
            config.set_value(key, value)
        return config

    def test_to_record(self):
        record = self.fill(DeployConfig()).to_record()
        self.assertEqual(record.domain, "example.com")
        self.assertEqual(record.tls_mode, TlsMode.NONE)
        self.assertEqual(record.server_names, ["example.com", "www.example.com"])
        self.assertEqual(record.env_file_path, "/opt/apps/esc/.env.docker")

    def test_issued_requires_contact_email(self):
        config = self.fill(DeployConfig(), **{KEY_CONFIG_ITEM_TLS_MODE: "letsencrypt"})
        with self.assertRaises(DeployConfigError):
            config.to_record()
        config.set_value(KEY_CONFIG_ITEM_TLS_CONTACT_EMAIL, "ops@example.com")
        self.assertEqual(config.to_record().tls_contact_email, "ops@example.com")

    def test_security_requires_contact_email(self):
        config = self.fill(DeployConfig(), **{KEY_CONFIG_ITEM_SECURITY_ENABLED: True})
        issues = config.validate()
        self.assertEqual([i.key for i in issues], [KEY_CONFIG_ITEM_SECURITY_CONTACT_EMAIL])

    def test_stray_email_is_an_issue(self):
        config = self.fill(DeployConfig(), **{KEY_CONFIG_ITEM_TLS_CONTACT_EMAIL: "ops@example.com"})
        self.assertEqual([i.key for i in config.validate()], [KEY_CONFIG_ITEM_TLS_CONTACT_EMAIL])

    def test_invalid_values_raise(self):
        config = DeployConfig()
        with self.assertRaises(ConfigValueValidationError):
            config.set_value(KEY_CONFIG_ITEM_DOMAIN_NAME, "not a domain")
        with self.assertRaises(ConfigValueValidationError):
            config.set_value(KEY_CONFIG_ITEM_TLS_MODE, "acme")
        with self.assertRaises(ConfigItemNotFoundError):
            config.get_item("nope")

    def test_configs_do_not_share_items(self):
        first = self.fill(DeployConfig())
        second = DeployConfig()
        self.assertEqual(first.get_value(KEY_CONFIG_ITEM_DOMAIN_NAME), "example.com")
        self.assertEqual(second.get_value(KEY_CONFIG_ITEM_DOMAIN_NAME), "")

    def test_record_roundtrip_and_downgrade(self):
        record = SettingsRecord(
            domain="example.com",
            registry_username="esc",
            tls_mode=TlsMode.ISSUED,
            tls_contact_email="ops@example.com",
            security_contact_email="admin@example.com",
        )
        self.assertEqual(DeployConfig(record).to_record(), record)

        plain = record.without_tls()
        self.assertEqual(plain.tls_mode, TlsMode.NONE)
        self.assertEqual(plain.tls_contact_email, "")
        self.assertEqual(plain.domain, record.domain)
        self.assertEqual(plain.validate(), [])


if __name__ == "__main__":
    unittest.main()
