#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Ordered provisioning steps and the loop that runs them.

Every step is a named, idempotent unit of work. Before running a step the
runner decides whether it is skipped (one-time step while reusing saved
settings, not selected, or already in place); otherwise it runs the action,
checks the optional postcondition and records the result in the context.
The first failure stops the run.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

import requests

from escdeploy.installer.configs.constants.enums import InstallerResult
from escdeploy.installer.core.deploy_config import SettingsRecord
from escdeploy.installer.core.install_context import InstallContext
from escdeploy.installer.utils.exceptions import (
    DeployError,
    OperatorAbortError,
    StepFailedError,
)
from escdeploy.installer.utils.logger_utils import InstallerLogger, SkipReasons

StepAction = Callable[[SettingsRecord, object, InstallContext], Tuple[InstallerResult, str]]
StepCheck = Callable[[SettingsRecord, object, InstallContext], bool]
StepSelector = Callable[[SettingsRecord, InstallContext], bool]


def _always(record: SettingsRecord, ctx: InstallContext) -> bool:
    return True


@dataclass
class ProvisionStep:
    name: str
    label: str
    action: StepAction
    one_time: bool = False
    enabled: StepSelector = _always
    is_done: Optional[StepCheck] = None
    verify: Optional[StepCheck] = None


@dataclass
class ProvisionOutcome:
    """What a provisioning run did, and the settings it actually applied."""

    record: SettingsRecord
    applied: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    error: Optional[StepFailedError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _skip(step: ProvisionStep, ctx: InstallContext, reason: str) -> None:
    InstallerLogger.end(step.label, InstallerResult.SKIPPED, reason)
    ctx.record_step(step.name, InstallerResult.SKIPPED)


def run_steps(steps: List[ProvisionStep], record: SettingsRecord, platform, ctx: InstallContext) -> SettingsRecord:
    """Run steps in order and return the effective record.

    Raises:
        StepFailedError: on the first step that fails (nothing is rolled back)
        OperatorAbortError: when the operator abandons a step
    """
    for step in steps:
        if step.one_time and ctx.reuse_mode:
            _skip(step, ctx, SkipReasons.REUSE_MODE)
            continue
        if not step.enabled(record, ctx):
            _skip(step, ctx, SkipReasons.NOT_SELECTED)
            continue
        if step.is_done is not None and step.is_done(record, platform, ctx):
            _skip(step, ctx, SkipReasons.ALREADY_DONE)
            continue

        InstallerLogger.start(step.label)
        try:
            result, message = step.action(record, platform, ctx)
        except OperatorAbortError:
            raise
        except (DeployError, OSError, requests.RequestException) as e:
            result, message = InstallerResult.FAILURE, str(e)

        if result == InstallerResult.SUCCESS and step.verify is not None and not step.verify(record, platform, ctx):
            result, message = InstallerResult.FAILURE, f"{step.label} did not take effect"

        InstallerLogger.end(step.label, result, message)
        ctx.record_step(step.name, result)
        if result == InstallerResult.FAILURE:
            raise StepFailedError(step.name, message)

        if ctx.tls_fallback and record.tls_mode.has_certificate:
            record = record.without_tls()

    return record
