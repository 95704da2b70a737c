#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Abstract base class for installer UI implementations, and the configurator built on it."""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

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
from escdeploy.installer.core.deploy_config import DeployConfig, SettingsRecord
from escdeploy.installer.core.install_context import InstallContext
from escdeploy.installer.core.validation import validate_email
from escdeploy.installer.utils.exceptions import ConfigValueValidationError, OperatorAbortError
from escdeploy.installer.utils.logger_utils import InstallerLogger

QUESTION_USE_EXISTING = "Use existing configuration?"
QUESTION_KEEP_TLS = "Keep the current SSL setting?"
QUESTION_CREATE_SERVICE_USER = "Create a dedicated deployment user?"
QUESTION_CONFIGURE_FIREWALL = "Configure the firewall (allow SSH, HTTP and HTTPS only)?"
QUESTION_REGISTRY_PASSWORD = "Docker Hub password or access token"
QUESTION_PROCEED = "Proceed with installation?"


class InstallerUI(ABC):
    """Abstract base class for installer UI implementations.

    This interface decouples the configurator from the presentation layer so
    the same prompting logic runs against a terminal or a scripted test UI.
    """

    @abstractmethod
    def ask_yes_no(self, message: str, default: bool = True) -> bool:
        """Ask the user a yes/no question.

        Args:
            message: The question to ask the user
            default: Default answer if user just presses enter

        Returns:
            True for yes, False for no
        """
        pass

    @abstractmethod
    def ask_string(self, prompt: str, default: str = "") -> str:
        """Ask the user for a string input.

        Args:
            prompt: The prompt to show the user
            default: Default value if user just presses enter

        Returns:
            The user's input string
        """
        pass

    @abstractmethod
    def ask_password(self, prompt: str) -> str:
        """Ask the user for a password (hidden input, never defaulted)."""
        pass

    @abstractmethod
    def ask_choice(self, prompt: str, choices: List[Tuple[str, str]], default: str) -> str:
        """Ask the user to pick one of (tag, description) choices and return the tag."""
        pass

    @abstractmethod
    def display_message(self, message: str) -> None:
        pass

    @abstractmethod
    def display_error(self, message: str) -> None:
        pass

    ###############################################################################################
    @staticmethod
    def format_summary(record: SettingsRecord, ctx: Optional[InstallContext] = None) -> str:
        lines = [
            "Configuration summary",
            "---------------------",
            f"  Domain:            {record.domain}",
            f"  Docker Hub user:   {record.registry_username}",
            f"  App directory:     {record.install_path}",
            f"  SSL:               {record.tls_mode.describe()}",
        ]
        if record.tls_mode == TlsMode.ISSUED:
            lines.append(f"  SSL email:         {record.tls_contact_email}")
        lines.append(f"  Security features: {'enabled' if record.security_enabled else 'disabled'}")
        if record.security_enabled:
            lines.append(f"  Admin email:       {record.security_contact_email}")
        if ctx is not None:
            if ctx.reuse_mode:
                lines.append("  One-time setup:    skipped (reusing saved configuration)")
            else:
                lines.append(f"  Deployment user:   {'yes' if ctx.create_service_user else 'no'}")
                lines.append(f"  Firewall:          {'yes' if ctx.configure_firewall else 'no'}")
        return "\n".join(lines)

    def _ask_item(self, config: DeployConfig, key: str) -> None:
        """Prompt for one string item until the operator gives a valid value."""
        item = config.get_item(key)
        while True:
            current = item.get_value()
            answer = self.ask_string(item.question, default="" if current is None else str(current))
            try:
                config.set_value(key, answer)
                return
            except ConfigValueValidationError as e:
                self.display_error(str(e))

    def _ask_required_email(self, config: DeployConfig, key: str) -> None:
        item = config.get_item(key)
        while True:
            answer = self.ask_string(item.question, default=item.get_value() or "").strip()
            ok, error = validate_email(answer)
            if ok:
                config.set_value(key, answer)
                return
            self.display_error(f"{item.label}: {error}")

    def _ask_tls_mode(self, config: DeployConfig, is_update: bool) -> None:
        item = config.get_item(KEY_CONFIG_ITEM_TLS_MODE)
        current = TlsMode.parse(item.get_value())
        if is_update and self.ask_yes_no(f"{QUESTION_KEEP_TLS} ({current.describe()})", default=True):
            return
        tag = self.ask_choice(item.question, item.choices, default=TlsMode.NONE.value)
        config.set_value(KEY_CONFIG_ITEM_TLS_MODE, tag or TlsMode.NONE.value)

    def _walk_settings(self, config: DeployConfig, is_update: bool) -> None:
        for key in (KEY_CONFIG_ITEM_DOMAIN_NAME, KEY_CONFIG_ITEM_REGISTRY_USERNAME, KEY_CONFIG_ITEM_INSTALL_PATH):
            self._ask_item(config, key)

        self._ask_tls_mode(config, is_update)
        if TlsMode.parse(config.get_value(KEY_CONFIG_ITEM_TLS_MODE)) == TlsMode.ISSUED:
            self._ask_required_email(config, KEY_CONFIG_ITEM_TLS_CONTACT_EMAIL)
        else:
            config.set_value(KEY_CONFIG_ITEM_TLS_CONTACT_EMAIL, "")

        security_item = config.get_item(KEY_CONFIG_ITEM_SECURITY_ENABLED)
        config.set_value(
            KEY_CONFIG_ITEM_SECURITY_ENABLED,
            self.ask_yes_no(security_item.question, default=bool(security_item.get_value())),
        )
        if config.get_value(KEY_CONFIG_ITEM_SECURITY_ENABLED):
            self._ask_required_email(config, KEY_CONFIG_ITEM_SECURITY_CONTACT_EMAIL)
        else:
            config.set_value(KEY_CONFIG_ITEM_SECURITY_CONTACT_EMAIL, "")

    def _ask_registry_password(self, ctx: InstallContext, username: str) -> None:
        while True:
            password = self.ask_password(f"{QUESTION_REGISTRY_PASSWORD} for {username}") or ""
            if password:
                ctx.registry_password = password
                return
            self.display_error("The registry password cannot be empty")

    def gather_config(
        self,
        existing: Optional[SettingsRecord],
        ctx: InstallContext,
        install_path: Optional[str] = None,
    ) -> Tuple[SettingsRecord, bool]:
        """Settle the settings for this run, pre-filled from the saved record.

        Args:
            existing: the saved record, if any
            ctx: per-run context; receives the reuse flag, one-time selections and password
            install_path: default application directory offered on a fresh install

        Returns:
            (record, reuse_mode); reuse_mode is also stored in the context

        Raises:
            OperatorAbortError: if the operator declines the final confirmation
        """
        record = None
        if existing is not None:
            issues = existing.validate()
            if issues:
                InstallerLogger.warning("Saved configuration is incomplete and needs to be reviewed:")
                for issue in issues:
                    InstallerLogger.warning(f"  {issue.label}: {issue.message}")
            else:
                self.display_message(self.format_summary(existing))
                if self.ask_yes_no(QUESTION_USE_EXISTING, default=True):
                    record = existing

        ctx.reuse_mode = record is not None
        if record is None:
            is_update = existing is not None
            config = DeployConfig(existing)
            if existing is None and install_path:
                config.set_value(KEY_CONFIG_ITEM_INSTALL_PATH, install_path)
            self._walk_settings(config, is_update)
            ctx.create_service_user = self.ask_yes_no(QUESTION_CREATE_SERVICE_USER, default=not is_update)
            ctx.configure_firewall = self.ask_yes_no(QUESTION_CONFIGURE_FIREWALL, default=not is_update)
            record = config.to_record()

        self._ask_registry_password(ctx, record.registry_username)

        self.display_message(self.format_summary(record, ctx))
        if not self.ask_yes_no(QUESTION_PROCEED, default=True):
            raise OperatorAbortError("Installation cancelled")

        return record, ctx.reuse_mode
