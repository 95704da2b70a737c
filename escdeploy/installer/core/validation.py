#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""
Validation helpers for the deployment settings.

Field-level validators are attached to each ConfigItem; validate_required()
enforces the cross-field rules (contact emails required by the TLS mode and
the security profile) on a whole DeployConfig or SettingsRecord.
"""

import os
import re
from dataclasses import dataclass
from typing import List, Tuple

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

# one or more dot-separated labels of letters, digits and inner hyphens
_DOMAIN_NAME_RE = re.compile(r"^(?=.{1,253}$)(?!-)[A-Za-z0-9-]{1,63}(?<!-)(?:\.(?!-)[A-Za-z0-9-]{1,63}(?<!-))*$")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass
class ValidationIssue:
    key: str
    label: str
    message: str


def _is_non_empty_str(value) -> bool:
    return isinstance(value, str) and len(value.strip()) > 0


def validate_domain_name(value) -> Tuple[bool, str]:
    if not _is_non_empty_str(value):
        return False, "Domain name cannot be empty"
    if not _DOMAIN_NAME_RE.match(value.strip()):
        return False, f"'{value}' is not a valid domain name"
    return True, ""


def validate_non_empty(value) -> Tuple[bool, str]:
    return (True, "") if _is_non_empty_str(value) else (False, "Value cannot be empty")


def validate_install_path(value) -> Tuple[bool, str]:
    if not _is_non_empty_str(value):
        return False, "Application directory cannot be empty"
    if not os.path.isabs(value.strip()):
        return False, "Application directory must be an absolute path"
    return True, ""


def validate_email(value) -> Tuple[bool, str]:
    if not _is_non_empty_str(value):
        return False, "Email cannot be empty"
    if not _EMAIL_RE.match(value.strip()):
        return False, f"'{value}' is not a valid email address"
    return True, ""


def validate_optional_email(value) -> Tuple[bool, str]:
    """Blank is allowed here; whether the email is required is a cross-field rule."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return True, ""
    return validate_email(value)


def validate_tls_mode(value) -> Tuple[bool, str]:
    try:
        TlsMode.parse(value)
    except ValueError as e:
        return False, str(e)
    return True, ""


def validate_required(settings) -> List[ValidationIssue]:
    """Return the list of issues preventing these settings from being used.

    Accepts anything with a get_value(key) method (DeployConfig) or a
    SettingsRecord (through its as_config_values() mapping).
    """
    if hasattr(settings, "as_config_values"):
        values = settings.as_config_values()
        get_value = values.get
    else:
        get_value = settings.get_value

    issues: List[ValidationIssue] = []

    def add_issue(key: str, label: str, message: str) -> None:
        issues.append(ValidationIssue(key=key, label=label, message=message))

    ok, msg = validate_domain_name(get_value(KEY_CONFIG_ITEM_DOMAIN_NAME))
    if not ok:
        add_issue(KEY_CONFIG_ITEM_DOMAIN_NAME, "Domain Name", msg)

    if not _is_non_empty_str(get_value(KEY_CONFIG_ITEM_REGISTRY_USERNAME)):
        add_issue(KEY_CONFIG_ITEM_REGISTRY_USERNAME, "Registry Username", "Registry username cannot be empty")

    ok, msg = validate_install_path(get_value(KEY_CONFIG_ITEM_INSTALL_PATH))
    if not ok:
        add_issue(KEY_CONFIG_ITEM_INSTALL_PATH, "Application Directory", msg)

    try:
        tls_mode = TlsMode.parse(get_value(KEY_CONFIG_ITEM_TLS_MODE))
    except ValueError as e:
        add_issue(KEY_CONFIG_ITEM_TLS_MODE, "TLS Mode", str(e))
        tls_mode = None

    tls_email = get_value(KEY_CONFIG_ITEM_TLS_CONTACT_EMAIL)
    if tls_mode == TlsMode.ISSUED:
        ok, msg = validate_email(tls_email)
        if not ok:
            add_issue(KEY_CONFIG_ITEM_TLS_CONTACT_EMAIL, "TLS Contact Email", f"Required for Let's Encrypt: {msg}")
    elif _is_non_empty_str(tls_email):
        add_issue(KEY_CONFIG_ITEM_TLS_CONTACT_EMAIL, "TLS Contact Email", "Only used with Let's Encrypt")

    security_email = get_value(KEY_CONFIG_ITEM_SECURITY_CONTACT_EMAIL)
    if bool(get_value(KEY_CONFIG_ITEM_SECURITY_ENABLED)):
        ok, msg = validate_email(security_email)
        if not ok:
            add_issue(
                KEY_CONFIG_ITEM_SECURITY_CONTACT_EMAIL,
                "Security Contact Email",
                f"Required when security features are enabled: {msg}",
            )
    elif _is_non_empty_str(security_email):
        add_issue(
            KEY_CONFIG_ITEM_SECURITY_CONTACT_EMAIL,
            "Security Contact Email",
            "Only used when security features are enabled",
        )

    return issues
