#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Read and write the saved deployment settings file."""

import os
import tempfile
from typing import Optional

from dotenv import dotenv_values

from escdeploy.deploy_constants import (
    DEFAULT_INSTALL_PATH,
    INSTALL_PATH_ENV_VAR,
    SETTINGS_FILE_NAME,
)
from escdeploy.deploy_utils import bool_to_str, str2bool
from escdeploy.installer.configs.constants.configuration_item_keys import (
    KEY_CONFIG_ITEM_DOMAIN_NAME,
    KEY_CONFIG_ITEM_INSTALL_PATH,
    KEY_CONFIG_ITEM_REGISTRY_USERNAME,
    KEY_CONFIG_ITEM_SECURITY_CONTACT_EMAIL,
    KEY_CONFIG_ITEM_SECURITY_ENABLED,
    KEY_CONFIG_ITEM_TLS_CONTACT_EMAIL,
    KEY_CONFIG_ITEM_TLS_MODE,
    SETTINGS_FILE_VARIABLES,
)
from escdeploy.installer.configs.constants.enums import TlsMode
from escdeploy.installer.core.deploy_config import SettingsRecord
from escdeploy.installer.utils.exceptions import FileOperationError
from escdeploy.installer.utils.logger_utils import InstallerLogger

SETTINGS_FILE_HEADER = [
    "# ESC Deployment Configuration",
    "# This file is used to remember settings for re-deployments",
]


def default_install_path() -> str:
    """The install path to look for saved settings in: $APP_DIR, else the default."""
    return os.getenv(INSTALL_PATH_ENV_VAR, "").strip() or DEFAULT_INSTALL_PATH


class SettingsFileHandler:
    """Handler for loading and saving the deployment settings file.

    The file holds KEY="value" lines (never the registry password) and is
    readable only by its owner. Saves replace the whole file atomically.
    """

    def __init__(self, install_path: Optional[str] = None):
        self.install_path = install_path or default_install_path()

    @property
    def settings_file_path(self) -> str:
        return os.path.join(self.install_path, SETTINGS_FILE_NAME)

    def load(self) -> Optional[SettingsRecord]:
        """Return the saved settings, or None when nothing has been saved yet."""
        path = self.settings_file_path
        if not os.path.isfile(path):
            InstallerLogger.debug(f"No saved settings at {path}")
            return None

        try:
            raw = dotenv_values(path)
        except OSError as e:
            raise FileOperationError(f"Unable to read {path}: {e}") from e

        def _get(key: str, default: str = "") -> str:
            value = raw.get(SETTINGS_FILE_VARIABLES[key])
            return default if value is None else value.strip()

        try:
            tls_mode = TlsMode.parse(_get(KEY_CONFIG_ITEM_TLS_MODE))
        except ValueError:
            InstallerLogger.warning(f"Unrecognized TLS mode in {path}; using {TlsMode.NONE.value}")
            tls_mode = TlsMode.NONE

        try:
            security_enabled = str2bool(_get(KEY_CONFIG_ITEM_SECURITY_ENABLED, "false"))
        except ValueError:
            security_enabled = False

        InstallerLogger.info(f"Found existing configuration in {path}")
        return SettingsRecord(
            domain=_get(KEY_CONFIG_ITEM_DOMAIN_NAME),
            registry_username=_get(KEY_CONFIG_ITEM_REGISTRY_USERNAME),
            install_path=_get(KEY_CONFIG_ITEM_INSTALL_PATH, self.install_path),
            tls_mode=tls_mode,
            tls_contact_email=_get(KEY_CONFIG_ITEM_TLS_CONTACT_EMAIL),
            security_enabled=security_enabled,
            security_contact_email=_get(KEY_CONFIG_ITEM_SECURITY_CONTACT_EMAIL),
        )

    @staticmethod
    def render(record: SettingsRecord) -> str:
        values = record.as_config_values()
        lines = list(SETTINGS_FILE_HEADER)
        for key, variable in SETTINGS_FILE_VARIABLES.items():
            value = values[key]
            if isinstance(value, TlsMode):
                value = value.value
            elif isinstance(value, bool):
                value = bool_to_str(value)
            escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
            lines.append(f'{variable}="{escaped}"')
        return "\n".join(lines) + "\n"

    def save(self, record: SettingsRecord) -> str:
        """Atomically replace the settings file under the record's install path.

        Returns:
            The path written.
        """
        self.install_path = record.install_path
        path = self.settings_file_path
        tmp_path = None
        try:
            os.makedirs(self.install_path, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=f"{SETTINGS_FILE_NAME}.", dir=self.install_path)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(self.render(record))
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, path)
            tmp_path = None
        except OSError as e:
            raise FileOperationError(f"Unable to save settings to {path}: {e}") from e
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)

        return path
