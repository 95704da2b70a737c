#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from escdeploy.installer.configs.constants.enums import InstallerResult


@dataclass
class CertificatePaths:
    """Where the reverse proxy finds its certificate material."""

    certificate: str
    key: str
    chain: Optional[str] = None
    dhparam: Optional[str] = None


@dataclass
class InstallContext:
    """Per-run choices and results that are never written to the settings file."""

    # saved settings were reused as-is; one-time setup steps are skipped
    reuse_mode: bool = False

    # registry password/token, only ever held in memory
    registry_password: str = field(default="", repr=False)

    # one-time setup selections
    create_service_user: bool = True
    configure_firewall: bool = True

    # set by the TLS step, read by the reverse proxy step
    cert_paths: Optional[CertificatePaths] = None

    # certificate issuance failed and the run continued without TLS
    tls_fallback: bool = False

    # step name -> result, in execution order
    step_results: Dict[str, InstallerResult] = field(default_factory=dict)

    def record_step(self, name: str, result: InstallerResult) -> None:
        self.step_results[name] = result

    def steps_with_result(self, result: InstallerResult, names: Optional[List[str]] = None) -> List[str]:
        return [n for n, r in self.step_results.items() if r == result and (names is None or n in names)]

    @property
    def applied_steps(self) -> List[str]:
        return self.steps_with_result(InstallerResult.SUCCESS)

    @property
    def skipped_steps(self) -> List[str]:
        return self.steps_with_result(InstallerResult.SKIPPED)
