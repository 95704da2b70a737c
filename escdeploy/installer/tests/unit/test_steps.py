#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Unit tests for the step runner: skip rules, verification and failure handling."""

import os
import sys
import unittest
from unittest.mock import MagicMock

import requests

# Add the project root directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", "..", "..")))

from escdeploy.installer.configs.constants.enums import InstallerResult, TlsMode
from escdeploy.installer.core.deploy_config import SettingsRecord
from escdeploy.installer.core.install_context import InstallContext
from escdeploy.installer.core.steps import ProvisionStep, run_steps
from escdeploy.installer.platforms.linux import ONE_TIME_STEP_NAMES, build_provision_steps
from escdeploy.installer.utils.exceptions import OperatorAbortError, StepFailedError
from escdeploy.installer.utils.logger_utils import InstallerLogger


def succeed(record, platform, ctx):
    return InstallerResult.SUCCESS, "done"


def fail(record, platform, ctx):
    return InstallerResult.FAILURE, "broken"


class TestRunSteps(unittest.TestCase):
    def setUp(self):
        InstallerLogger.set_console_output(False)
        self.record = SettingsRecord(
            domain="example.com",
            registry_username="esc",
            tls_mode=TlsMode.SELF_SIGNED,
            security_contact_email="admin@example.com",
        )
        self.platform = MagicMock()
        self.ctx = InstallContext()

    def test_skip_rules(self):
        steps = [
            ProvisionStep("once", "Once", succeed, one_time=True),
            ProvisionStep("unselected", "Unselected", succeed, enabled=lambda record, ctx: False),
            ProvisionStep("present", "Present", succeed, is_done=lambda record, platform, ctx: True),
            ProvisionStep("always", "Always", succeed),
        ]
        self.ctx.reuse_mode = True

        run_steps(steps, self.record, self.platform, self.ctx)

        self.assertEqual(self.ctx.skipped_steps, ["once", "unselected", "present"])
        self.assertEqual(self.ctx.applied_steps, ["always"])

    def test_one_time_steps_run_on_fresh_install(self):
        steps = [ProvisionStep("once", "Once", succeed, one_time=True)]
        run_steps(steps, self.record, self.platform, self.ctx)
        self.assertEqual(self.ctx.applied_steps, ["once"])

    def test_first_failure_stops_the_run(self):
        later = MagicMock(return_value=(InstallerResult.SUCCESS, ""))
        steps = [
            ProvisionStep("first", "First", succeed),
            ProvisionStep("second", "Second", fail),
            ProvisionStep("third", "Third", later),
        ]
        with self.assertRaises(StepFailedError) as raised:
            run_steps(steps, self.record, self.platform, self.ctx)

        self.assertEqual(raised.exception.step, "second")
        self.assertEqual(raised.exception.cause, "broken")
        later.assert_not_called()
        self.assertEqual(self.ctx.step_results["second"], InstallerResult.FAILURE)

    def test_failed_postcondition_is_a_failure(self):
        steps = [ProvisionStep("checked", "Checked", succeed, verify=lambda record, platform, ctx: False)]
        with self.assertRaises(StepFailedError):
            run_steps(steps, self.record, self.platform, self.ctx)

    def test_postcondition_not_checked_after_skip(self):
        verify = MagicMock(return_value=False)

        def skipped(record, platform, ctx):
            return InstallerResult.SKIPPED, "nothing to do"

        run_steps([ProvisionStep("quiet", "Quiet", skipped, verify=verify)], self.record, self.platform, self.ctx)
        verify.assert_not_called()

    def test_errors_raised_by_actions_become_failures(self):
        for error in (OSError("disk full"), requests.ConnectionError("offline")):
            with self.subTest(error=type(error).__name__):

                def explode(record, platform, ctx, error=error):
                    raise error

                with self.assertRaises(StepFailedError):
                    run_steps([ProvisionStep("boom", "Boom", explode)], self.record, self.platform, InstallContext())

    def test_operator_abort_propagates(self):
        def abort(record, platform, ctx):
            raise OperatorAbortError("no")

        with self.assertRaises(OperatorAbortError):
            run_steps([ProvisionStep("ask", "Ask", abort)], self.record, self.platform, self.ctx)

    def test_tls_fallback_downgrades_following_steps(self):
        seen = []

        def give_up_on_tls(record, platform, ctx):
            ctx.tls_fallback = True
            return InstallerResult.SKIPPED, "no certificate"

        def observe(record, platform, ctx):
            seen.append(record.tls_mode)
            return InstallerResult.SUCCESS, ""

        effective = run_steps(
            [ProvisionStep("tls", "TLS", give_up_on_tls), ProvisionStep("proxy", "Proxy", observe)],
            self.record,
            self.platform,
            self.ctx,
        )

        self.assertEqual(seen, [TlsMode.NONE])
        self.assertEqual(effective.tls_mode, TlsMode.NONE)
        self.assertEqual(self.record.tls_mode, TlsMode.SELF_SIGNED)


class TestProvisionSequence(unittest.TestCase):
    def test_order_and_one_time_steps(self):
        names = [step.name for step in build_provision_steps()]
        self.assertEqual(len(names), 14)
        self.assertEqual(len(set(names)), len(names))
        self.assertEqual(ONE_TIME_STEP_NAMES, ["system_packages", "service_account", "firewall"])
        self.assertLess(names.index("tls_certificate"), names.index("reverse_proxy_config"))
        self.assertLess(names.index("source_checkout"), names.index("environment_file"))
        self.assertEqual(names[-1], "helper_commands")


if __name__ == "__main__":
    unittest.main()
