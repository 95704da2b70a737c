#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""
Application environment file (.env.docker): render, edit, validate.

A freshly rendered document keeps the SECRET_KEY and ALLOWED_HOSTS
placeholders so the operator has to look at it before the stack can start;
the generated key and the suggested host list are written in comments
directly above them.
"""

import io
import secrets
import string
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Tuple, Union

from dotenv import dotenv_values

from escdeploy.deploy_constants import ENV_FILE_BACKUP_SUFFIX_FORMAT
from escdeploy.installer.configs.constants.constants import (
    ENV_ALLOWED_HOSTS_PLACEHOLDER_TOKEN,
    ENV_ALLOWED_HOSTS_VAR,
    ENV_DATABASE_URL_PLACEHOLDER_PATTERN,
    ENV_DATABASE_URL_VAR,
    ENV_EMAIL_USER_PLACEHOLDER,
    ENV_EMAIL_USER_VAR,
    ENV_ENVIRONMENT_VAR,
    ENV_OBJECT_STORAGE_PLACEHOLDERS,
    ENV_PAYMENT_PLACEHOLDERS,
    ENV_PRODUCTION_PROFILE,
    ENV_SECRET_KEY_BYTES,
    ENV_SECRET_KEY_PLACEHOLDER,
    ENV_SECRET_KEY_VAR,
    ENV_TEMPLATE_SECTIONS,
)
from escdeploy.installer.configs.constants.enums import InstallerResult
from escdeploy.installer.utils.exceptions import DeployConfigError, OperatorAbortError
from escdeploy.installer.utils.logger_utils import InstallerLogger

_BANNER = "# " + "=" * 44


@dataclass
class EnvValidationResult:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def suggested_allowed_hosts(domain: str) -> str:
    return f"localhost,127.0.0.1,{domain},www.{domain}"


def render_env_document(domain: str, secret_key: str = None) -> str:
    """Render a fresh environment document for the domain.

    Raises:
        DeployConfigError: if a template value references anything but ${domain}
    """
    if secret_key is None:
        secret_key = secrets.token_urlsafe(ENV_SECRET_KEY_BYTES)

    lines = [
        "# ESC application environment",
        f"# Generated {datetime.now().strftime('%Y-%m-%d %H:%M:%S')} for {domain}",
    ]
    for title, variables in ENV_TEMPLATE_SECTIONS:
        lines.extend(["", _BANNER, f"# {title}", _BANNER])
        for name, template in variables:
            try:
                value = string.Template(template).substitute(domain=domain)
            except (KeyError, ValueError) as e:
                raise DeployConfigError(f"Unresolved placeholder in template for {name}: {e}") from e
            if name == ENV_SECRET_KEY_VAR:
                lines.append(f"# Generated key, paste it below: {secret_key}")
            elif name == ENV_ALLOWED_HOSTS_VAR:
                lines.append(f"# Suggested for this server: {suggested_allowed_hosts(domain)}")
            lines.append(f"{name}={value}")

    return "\n".join(lines) + "\n"


def parse_env_document(document: str) -> Dict[str, str]:
    return {k: ("" if v is None else v) for k, v in dotenv_values(stream=io.StringIO(document)).items()}


def validate_env_document(document: Union[str, Dict[str, str]]) -> EnvValidationResult:
    """Check a document (text or parsed mapping) for values that were never filled in."""
    values = parse_env_document(document) if isinstance(document, str) else dict(document)
    result = EnvValidationResult()

    secret_key = values.get(ENV_SECRET_KEY_VAR, "").strip()
    if not secret_key or secret_key == ENV_SECRET_KEY_PLACEHOLDER:
        result.errors.append(f"{ENV_SECRET_KEY_VAR} is not configured")

    allowed_hosts = values.get(ENV_ALLOWED_HOSTS_VAR, "").strip()
    if not allowed_hosts or ENV_ALLOWED_HOSTS_PLACEHOLDER_TOKEN in allowed_hosts:
        result.errors.append(f"{ENV_ALLOWED_HOSTS_VAR} is empty or contains the placeholder domain")

    if ENV_DATABASE_URL_PLACEHOLDER_PATTERN in values.get(ENV_DATABASE_URL_VAR, ""):
        result.warnings.append(f"{ENV_DATABASE_URL_VAR} contains placeholder credentials")

    if values.get(ENV_EMAIL_USER_VAR, "").strip() == ENV_EMAIL_USER_PLACEHOLDER:
        result.warnings.append("Email is not configured")

    if values.get(ENV_ENVIRONMENT_VAR, "").strip() == ENV_PRODUCTION_PROFILE:
        for placeholders, what in (
            (ENV_OBJECT_STORAGE_PLACEHOLDERS, "object storage"),
            (ENV_PAYMENT_PLACEHOLDERS, "payment gateway"),
        ):
            for name, placeholder in placeholders.items():
                if values.get(name, "").strip() == placeholder:
                    result.warnings.append(f"{name} is still a placeholder ({what})")

    return result


def report_validation(result: EnvValidationResult) -> None:
    for error in result.errors:
        InstallerLogger.error(error)
    for warning in result.warnings:
        InstallerLogger.warning(warning)
    if result.ok and not result.warnings:
        InstallerLogger.success("Environment file validated")


def backup_path_for(path: str, when: datetime = None) -> str:
    return f"{path}.backup.{(when or datetime.now()).strftime(ENV_FILE_BACKUP_SUFFIX_FORMAT)}"


def edit_env_file(platform, path: str) -> str:
    """Open the file in the operator's editor and return what they saved."""
    retcode = platform.open_editor(path)
    if retcode != 0:
        InstallerLogger.warning(f"Editor exited with status {retcode}")
    return platform.read_file(path) or ""


def edit_until_valid(platform, path: str) -> EnvValidationResult:
    """Edit and validate until the document has no errors and any warnings are accepted.

    Raises:
        OperatorAbortError: if the operator gives up while errors remain
    """
    ui = platform.ui
    while True:
        ui.display_message(f"Opening {path} for editing. Save and exit the editor when done.")
        result = validate_env_document(edit_env_file(platform, path))
        report_validation(result)
        if result.errors:
            if not ui.ask_yes_no("Edit the environment file again?", default=True):
                raise OperatorAbortError("Environment file still has configuration errors")
            continue
        if result.warnings and not ui.ask_yes_no("Proceed with these warnings?", default=False):
            continue
        return result


def configure_environment_file(record, platform, ctx) -> Tuple[InstallerResult, str]:
    """Create or reconfigure the environment file, then have the operator complete it."""
    path = record.env_file_path
    ui = platform.ui

    if platform.path_exists(path):
        existing = platform.read_file(path) or ""
        mentions_domain = record.domain in existing
        if not mentions_domain:
            InstallerLogger.warning(f"{path} does not mention {record.domain}")
        if not ui.ask_yes_no(f"{path} already exists. Reconfigure it?", default=not mentions_domain):
            return InstallerResult.SKIPPED, "Keeping existing environment file"
        backup = backup_path_for(path)
        err, out = platform.run_process(["cp", "-p", path, backup])
        if err != 0:
            return InstallerResult.FAILURE, f"Unable to back up {path}: {' '.join(out)}"
        InstallerLogger.info(f"Previous environment file saved as {backup}")

    if not platform.write_file(path, render_env_document(record.domain), mode=0o600, privileged=False):
        return InstallerResult.FAILURE, f"Unable to write {path}"

    edit_until_valid(platform, path)
    return InstallerResult.SUCCESS, f"Environment file written to {path}"
