#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Deployment settings: the mutable ConfigItem store and the immutable record.

DeployConfig is what the configurator edits, one ConfigItem at a time.
Once the operator confirms, it is frozen into a SettingsRecord which is
handed by value to the provisioner and finally to the settings store.
"""

import copy
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterator, List, Optional

from escdeploy.deploy_constants import (
    DEFAULT_INSTALL_PATH,
    ENV_FILE_NAME,
    SETTINGS_FILE_NAME,
)
from escdeploy.installer.configs.configuration_items import get_all_config_items_dict
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
from escdeploy.installer.core.validation import ValidationIssue, validate_required
from escdeploy.installer.utils.exceptions import (
    ConfigItemNotFoundError,
    ConfigValueValidationError,
    DeployConfigError,
)


@dataclass(frozen=True)
class SettingsRecord:
    """Finalized deployment settings for one run."""

    domain: str
    registry_username: str
    install_path: str = DEFAULT_INSTALL_PATH
    tls_mode: TlsMode = TlsMode.NONE
    tls_contact_email: str = ""
    security_enabled: bool = True
    security_contact_email: str = ""

    @property
    def server_names(self) -> List[str]:
        return [self.domain, f"www.{self.domain}"]

    @property
    def settings_file_path(self) -> str:
        return f"{self.install_path.rstrip('/')}/{SETTINGS_FILE_NAME}"

    @property
    def env_file_path(self) -> str:
        return f"{self.install_path.rstrip('/')}/{ENV_FILE_NAME}"

    def as_config_values(self) -> Dict[str, Any]:
        return {
            KEY_CONFIG_ITEM_DOMAIN_NAME: self.domain,
            KEY_CONFIG_ITEM_REGISTRY_USERNAME: self.registry_username,
            KEY_CONFIG_ITEM_INSTALL_PATH: self.install_path,
            KEY_CONFIG_ITEM_TLS_MODE: self.tls_mode,
            KEY_CONFIG_ITEM_TLS_CONTACT_EMAIL: self.tls_contact_email,
            KEY_CONFIG_ITEM_SECURITY_ENABLED: self.security_enabled,
            KEY_CONFIG_ITEM_SECURITY_CONTACT_EMAIL: self.security_contact_email,
        }

    def validate(self) -> List[ValidationIssue]:
        return validate_required(self)

    def without_tls(self) -> "SettingsRecord":
        """This record downgraded to plaintext (used when certificate issuance fails)."""
        return replace(self, tls_mode=TlsMode.NONE, tls_contact_email="")


class DeployConfig:
    """Mutable collection of ConfigItems edited by the configurator."""

    def __init__(self, record: Optional[SettingsRecord] = None):
        # module-level item definitions are shared, so each config works on its own copies
        self._items: Dict[str, ConfigItem] = copy.deepcopy(get_all_config_items_dict())
        if record is not None:
            self.apply_record(record)

    def __iter__(self) -> Iterator[ConfigItem]:
        return iter(self._items.values())

    def get_item(self, key: str) -> ConfigItem:
        if key not in self._items:
            raise ConfigItemNotFoundError(key)
        return self._items[key]

    def get_value(self, key: str) -> Any:
        return self.get_item(key).get_value()

    def set_value(self, key: str, value: Any) -> None:
        """Set a value, raising ConfigValueValidationError if the item's validator rejects it."""
        item = self.get_item(key)
        if isinstance(value, str) and not item.is_password:
            value = value.strip()
        if key == KEY_CONFIG_ITEM_TLS_MODE:
            try:
                value = TlsMode.parse(value)
            except ValueError as e:
                raise ConfigValueValidationError(key, value, str(e)) from e
        ok, error = item.set_value(value)
        if not ok:
            raise ConfigValueValidationError(key, value, error)

    def apply_record(self, record: SettingsRecord) -> None:
        """Load every value from a record without validation (saved files may be stale)."""
        for key, value in record.as_config_values().items():
            item = self.get_item(key)
            item.value = value

    def validate(self) -> List[ValidationIssue]:
        return validate_required(self)

    def to_record(self) -> SettingsRecord:
        """Freeze the current values, refusing if a cross-field rule is violated."""
        issues = self.validate()
        if issues:
            raise DeployConfigError("; ".join(f"{i.label}: {i.message}" for i in issues))
        return SettingsRecord(
            domain=self.get_value(KEY_CONFIG_ITEM_DOMAIN_NAME),
            registry_username=self.get_value(KEY_CONFIG_ITEM_REGISTRY_USERNAME),
            install_path=self.get_value(KEY_CONFIG_ITEM_INSTALL_PATH),
            tls_mode=TlsMode.parse(self.get_value(KEY_CONFIG_ITEM_TLS_MODE)),
            tls_contact_email=self.get_value(KEY_CONFIG_ITEM_TLS_CONTACT_EMAIL) or "",
            security_enabled=bool(self.get_value(KEY_CONFIG_ITEM_SECURITY_ENABLED)),
            security_contact_email=self.get_value(KEY_CONFIG_ITEM_SECURITY_CONTACT_EMAIL) or "",
        )
