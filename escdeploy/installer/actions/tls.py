#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""TLS certificate material: issued (certbot), self-signed (openssl) or none."""

import os
from typing import List, Optional, Tuple

from escdeploy.deploy_constants import (
    CERT_ISSUER_PACKAGES,
    CERT_RENEWAL_CRON_ENTRY,
    LETSENCRYPT_LIVE_DIR,
    SELF_SIGNED_CERT_PATH,
    SELF_SIGNED_DHPARAM_PATH,
    SELF_SIGNED_DIR,
    SELF_SIGNED_KEY_BITS,
    SELF_SIGNED_KEY_PATH,
    SELF_SIGNED_SUBJECT_PREFIX,
    SELF_SIGNED_VALID_DAYS,
)
from escdeploy.installer.configs.constants.enums import InstallerResult, TlsMode
from escdeploy.installer.core.install_context import CertificatePaths
from escdeploy.installer.utils.logger_utils import InstallerLogger


def certificate_paths(record) -> Optional[CertificatePaths]:
    """Where the material for the record's TLS mode lives (None for plaintext)."""
    if record.tls_mode == TlsMode.ISSUED:
        live_dir = os.path.join(LETSENCRYPT_LIVE_DIR, record.domain)
        return CertificatePaths(
            certificate=os.path.join(live_dir, "fullchain.pem"),
            key=os.path.join(live_dir, "privkey.pem"),
            chain=os.path.join(live_dir, "chain.pem"),
        )
    if record.tls_mode == TlsMode.SELF_SIGNED:
        return CertificatePaths(
            certificate=SELF_SIGNED_CERT_PATH,
            key=SELF_SIGNED_KEY_PATH,
            dhparam=SELF_SIGNED_DHPARAM_PATH,
        )
    return None


def _material_files(paths: CertificatePaths) -> List[str]:
    return [p for p in (paths.certificate, paths.key, paths.chain, paths.dhparam) if p]


def certificate_material_exists(record, platform) -> bool:
    paths = certificate_paths(record)
    return paths is not None and all(platform.privileged_path_exists(p) for p in _material_files(paths))


def issue_certificate_command(record) -> List[str]:
    command = [
        "certbot",
        "certonly",
        "--standalone",
        "--non-interactive",
        "--agree-tos",
        "--email",
        record.tls_contact_email,
    ]
    for name in record.server_names:
        command.extend(["-d", name])
    return command


def install_renewal_cron(platform) -> bool:
    """Add the certbot renewal entry to root's crontab unless it is already there."""
    err, out = platform.run_process(["crontab", "-l"], privileged=True, stderr=False)
    entries = out if err == 0 else []
    if CERT_RENEWAL_CRON_ENTRY in entries:
        InstallerLogger.debug("Certificate renewal cron entry already present")
        return True
    err, out = platform.run_process(
        ["crontab", "-"],
        privileged=True,
        stdin="\n".join(entries + [CERT_RENEWAL_CRON_ENTRY]) + "\n",
    )
    if err != 0:
        InstallerLogger.error(f"Unable to install certificate renewal cron entry: {' '.join(out)}")
    return err == 0


def obtain_issued_certificate(record, platform, ctx) -> Tuple[InstallerResult, str]:
    if not platform.install_package(CERT_ISSUER_PACKAGES):
        return InstallerResult.FAILURE, "Unable to install certbot"

    # the standalone authenticator needs port 80
    err, out = platform.run_process(["systemctl", "stop", "nginx"], privileged=True)
    if err != 0:
        InstallerLogger.debug(f"nginx was not stopped: {' '.join(out)}")

    err, out = platform.run_process(issue_certificate_command(record), privileged=True)
    if err != 0:
        InstallerLogger.warning(f"Certificate issuance for {record.domain} failed: {' '.join(out[-3:])}")
        InstallerLogger.warning("Continuing without TLS; run the deployment again once DNS points at this server")
        ctx.tls_fallback = True
        ctx.cert_paths = None
        return InstallerResult.SKIPPED, "Certificate issuance failed, continuing without TLS"

    if not install_renewal_cron(platform):
        return InstallerResult.FAILURE, "Unable to schedule certificate renewal"

    ctx.cert_paths = certificate_paths(record)
    return InstallerResult.SUCCESS, f"Certificate issued for {', '.join(record.server_names)}"


def create_self_signed_certificate(record, platform, ctx) -> Tuple[InstallerResult, str]:
    paths = certificate_paths(record)
    err, out = platform.run_process(["mkdir", "-p", SELF_SIGNED_DIR], privileged=True)
    if err != 0:
        return InstallerResult.FAILURE, f"Unable to create {SELF_SIGNED_DIR}: {' '.join(out)}"

    err, out = platform.run_process(
        [
            "openssl",
            "req",
            "-x509",
            "-nodes",
            "-days",
            str(SELF_SIGNED_VALID_DAYS),
            "-newkey",
            f"rsa:{SELF_SIGNED_KEY_BITS}",
            "-keyout",
            paths.key,
            "-out",
            paths.certificate,
            "-subj",
            f"{SELF_SIGNED_SUBJECT_PREFIX}{record.domain}",
        ],
        privileged=True,
    )
    if err != 0:
        return InstallerResult.FAILURE, f"openssl failed to create the certificate: {' '.join(out[-3:])}"

    if not platform.privileged_path_exists(paths.dhparam):
        InstallerLogger.info("Generating Diffie-Hellman parameters (this can take a few minutes)")
        err, out = platform.run_process(
            ["openssl", "dhparam", "-out", paths.dhparam, str(SELF_SIGNED_KEY_BITS)],
            privileged=True,
        )
        if err != 0:
            return InstallerResult.FAILURE, f"openssl failed to create DH parameters: {' '.join(out[-3:])}"

    err, out = platform.run_process(["chmod", "600", paths.key], privileged=True)
    if err != 0:
        return InstallerResult.FAILURE, f"Unable to restrict permissions on {paths.key}: {' '.join(out)}"

    ctx.cert_paths = paths
    InstallerLogger.warning("Self-signed certificates are not trusted by browsers")
    return InstallerResult.SUCCESS, f"Self-signed certificate created at {paths.certificate}"


def ensure_tls_certificate(record, platform, ctx) -> Tuple[InstallerResult, str]:
    """Make sure the material for the selected mode exists and record its paths."""
    if record.tls_mode == TlsMode.NONE:
        ctx.cert_paths = None
        return InstallerResult.SKIPPED, "TLS not selected, serving plaintext"

    if certificate_material_exists(record, platform):
        ctx.cert_paths = certificate_paths(record)
        return InstallerResult.SKIPPED, f"Using existing certificate {ctx.cert_paths.certificate}"

    if record.tls_mode == TlsMode.ISSUED:
        return obtain_issued_certificate(record, platform, ctx)
    return create_self_signed_certificate(record, platform, ctx)
