#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""
nginx site configuration for the application.

render() is a pure function of the settings record and the certificate
paths; the document is regenerated in full on every deployment. The
configure step writes it, enables it, and refuses to restart nginx if
"nginx -t" rejects it.
"""

from typing import List, Optional, Tuple

from escdeploy.deploy_constants import (
    ACME_WEBROOT,
    CLIENT_MAX_BODY_SIZE_DEFAULT,
    NGINX_ACCESS_LOG,
    NGINX_CDN_BLOCKED_LOG,
    NGINX_DEFAULT_SITE_LINK_PATH,
    NGINX_ERROR_LOG,
    NGINX_SITE_LINK_PATH,
    NGINX_SITE_PATH,
    NGINX_UPSTREAM_NAME,
    PROXY_TIMEOUT_DEFAULT,
    REVERSE_PROXY_PACKAGE,
    UPSTREAM_HOST,
    UPSTREAM_KEEPALIVE,
    UPSTREAM_PORT,
)
from escdeploy.installer.actions.tls import certificate_paths
from escdeploy.installer.configs.constants.constants import (
    ALLOWED_REQUEST_METHODS,
    AUTH_PATH_PATTERN,
    CDN_CLIENT_IP_HEADER,
    CDN_IP_RANGES,
    CONNECTION_LIMIT_ZONE,
    DENIED_LOCATIONS,
    HSTS_HEADER,
    RATE_LIMIT_STATUS,
    RATE_LIMIT_ZONE_API,
    RATE_LIMIT_ZONE_AUTH,
    RATE_LIMIT_ZONE_GENERAL,
    RATE_LIMIT_ZONE_SIZE,
    RATE_LIMIT_ZONES,
    SECURITY_HEADERS,
    TLS_CIPHERS,
    TLS_PROTOCOLS,
)
from escdeploy.installer.configs.constants.enums import InstallerResult, TlsMode
from escdeploy.installer.core.install_context import CertificatePaths
from escdeploy.installer.utils.logger_utils import InstallerLogger

INDENT = "    "


def _block(header: str, body: List[str], depth: int = 0) -> List[str]:
    pad = INDENT * depth
    lines = [f"{pad}{header} {{"]
    lines.extend(f"{pad}{INDENT}{line}" if line else "" for line in body)
    lines.append(f"{pad}}}")
    return lines


def _listen(port: int, ssl: bool = False, default: bool = False) -> List[str]:
    suffix = (" ssl http2" if ssl else "") + (" default_server" if default else "")
    return [f"listen {port}{suffix};", f"listen [::]:{port}{suffix};"]


def _cdn_only() -> List[str]:
    # requests that bypassed the CDN also go to their own log for the ban filter
    return [f"access_log {NGINX_CDN_BLOCKED_LOG} combined if=$cdn_bypass;"] + _block(
        "if ($is_cloudflare = 0)", ["return 403;"]
    )


def _proxy_headers() -> List[str]:
    return [
        f"proxy_pass http://{NGINX_UPSTREAM_NAME};",
        "proxy_set_header Host $host;",
        "proxy_set_header X-Real-IP $remote_addr;",
        "proxy_set_header X-Forwarded-For $proxy_add_x_forwarded_for;",
        "proxy_set_header X-Forwarded-Proto $scheme;",
    ]


def _rate_limits(zone) -> List[str]:
    return [
        f"limit_req zone={zone.name} burst={zone.burst} nodelay;",
        f"limit_conn {CONNECTION_LIMIT_ZONE} {zone.connections};",
    ]


def _http_context(security_enabled: bool) -> List[str]:
    lines = _block("upstream " + NGINX_UPSTREAM_NAME, [
        f"server {UPSTREAM_HOST}:{UPSTREAM_PORT};",
        f"keepalive {UPSTREAM_KEEPALIVE};",
    ])
    if not security_enabled:
        return lines

    lines.extend(["", "# addresses of the fronting CDN"])
    lines.extend(
        _block("geo $realip_remote_addr $is_cloudflare", ["default 0;"] + [f"{cidr} 1;" for cidr in CDN_IP_RANGES])
    )
    lines.append("")
    lines.extend(_block("map $is_cloudflare $cdn_bypass", ["0 1;", "default 0;"]))
    lines.extend(["", "# the client address as reported by the CDN"])
    lines.extend(f"set_real_ip_from {cidr};" for cidr in CDN_IP_RANGES)
    lines.append(f"real_ip_header {CDN_CLIENT_IP_HEADER};")

    lines.extend(["", "# request and connection limits per client address"])
    for zone in RATE_LIMIT_ZONES:
        lines.append(f"limit_req_zone $binary_remote_addr zone={zone.name}:{RATE_LIMIT_ZONE_SIZE} rate={zone.rate};")
    lines.append(f"limit_req_status {RATE_LIMIT_STATUS};")
    lines.append(f"limit_conn_zone $binary_remote_addr zone={CONNECTION_LIMIT_ZONE}:{RATE_LIMIT_ZONE_SIZE};")
    lines.append(f"limit_conn_status {RATE_LIMIT_STATUS};")
    return lines


def _tls_directives(record, paths: CertificatePaths) -> List[str]:
    lines = [
        f"ssl_certificate {paths.certificate};",
        f"ssl_certificate_key {paths.key};",
        f"ssl_protocols {TLS_PROTOCOLS};",
        f"ssl_ciphers {TLS_CIPHERS};",
        "ssl_prefer_server_ciphers off;",
        "ssl_session_cache shared:SSL:10m;",
        "ssl_session_timeout 10m;",
        "ssl_session_tickets off;",
        f'add_header {HSTS_HEADER[0]} "{HSTS_HEADER[1]}" always;',
    ]
    if record.tls_mode == TlsMode.ISSUED:
        lines.extend(["ssl_stapling on;", "ssl_stapling_verify on;"])
        if paths.chain:
            lines.append(f"ssl_trusted_certificate {paths.chain};")
    elif paths.dhparam:
        lines.append(f"ssl_dhparam {paths.dhparam};")
    return lines


def _default_server(paths: Optional[CertificatePaths]) -> List[str]:
    body = _listen(80, default=True)
    if paths is not None:
        body.extend(_listen(443, ssl=True, default=True))
        body.extend([f"ssl_certificate {paths.certificate};", f"ssl_certificate_key {paths.key};"])
    body.extend(["server_name _;", f"access_log {NGINX_ACCESS_LOG};", ""])
    body.extend(_cdn_only())
    body.append("")
    body.extend(_block("location /", ["return 403;"]))
    return ["# anything not addressed to this site, or not arriving through the CDN"] + _block("server", body)


def _redirect_server(record) -> List[str]:
    body = _listen(80) + [f"server_name {' '.join(record.server_names)};", ""]
    if record.security_enabled:
        body.extend([f"access_log {NGINX_ACCESS_LOG};"] + _cdn_only() + [""])
    if record.tls_mode == TlsMode.ISSUED:
        body.extend(_block("location /.well-known/acme-challenge/", [f"root {ACME_WEBROOT};"]) + [""])
    body.extend(_block("location /", ["return 301 https://$host$request_uri;"]))
    return _block("server", body)


def _application_locations(security_enabled: bool) -> List[str]:
    lines = []
    if security_enabled:
        lines.extend(_block(f"if ($request_method !~ ^({'|'.join(ALLOWED_REQUEST_METHODS)})$)", ["return 405;"]))
        for pattern in DENIED_LOCATIONS:
            lines.append("")
            lines.extend(_block(f"location {pattern}", ["deny all;", "access_log off;", "log_not_found off;"]))
        lines.append("")

    root = []
    if security_enabled:
        root.extend(_rate_limits(RATE_LIMIT_ZONE_GENERAL))
    root.extend(_proxy_headers())
    root.extend([
        "proxy_http_version 1.1;",
        "proxy_set_header Upgrade $http_upgrade;",
        'proxy_set_header Connection "upgrade";',
    ])
    lines.extend(_block("location /", root))

    if security_enabled:
        for path, zone in (("/api/", RATE_LIMIT_ZONE_API), (f"~ {AUTH_PATH_PATTERN}", RATE_LIMIT_ZONE_AUTH)):
            lines.append("")
            lines.extend(_block(f"location {path}", _rate_limits(zone) + _proxy_headers()))

    lines.append("")
    lines.extend(
        _block(
            "location /health",
            [
                "access_log off;",
                f"proxy_pass http://{NGINX_UPSTREAM_NAME};",
                "proxy_set_header Host $host;",
                "proxy_connect_timeout 5s;",
                "proxy_read_timeout 5s;",
            ],
        )
    )
    return lines


def _application_server(
    record,
    paths: Optional[CertificatePaths],
    client_max_body_size: str,
    proxy_timeout: str,
) -> List[str]:
    body = _listen(443, ssl=True) if paths is not None else _listen(80)
    body.extend([f"server_name {' '.join(record.server_names)};", ""])
    if record.security_enabled:
        body.extend(_cdn_only() + [""])
    if paths is not None:
        body.extend(_tls_directives(record, paths) + [""])
    body.extend(f'add_header {name} "{value}" always;' for name, value in SECURITY_HEADERS)
    body.extend([
        "",
        f"access_log {NGINX_ACCESS_LOG};",
        f"error_log {NGINX_ERROR_LOG};",
        "",
        f"client_max_body_size {client_max_body_size};",
        f"proxy_connect_timeout {proxy_timeout};",
        f"proxy_send_timeout {proxy_timeout};",
        f"proxy_read_timeout {proxy_timeout};",
        f"send_timeout {proxy_timeout};",
        "",
    ])
    body.extend(_application_locations(record.security_enabled))
    return _block("server", body)


def render(
    record,
    cert_paths: Optional[CertificatePaths] = None,
    client_max_body_size: str = CLIENT_MAX_BODY_SIZE_DEFAULT,
    proxy_timeout: str = PROXY_TIMEOUT_DEFAULT,
) -> str:
    """Render the complete site configuration for a settings record.

    Args:
        record: the SettingsRecord being deployed
        cert_paths: certificate material to reference; ignored when the record
            has no TLS, and derived from the TLS mode when omitted
        client_max_body_size: nginx size string for request bodies
        proxy_timeout: nginx time string used for the upstream timeouts

    Returns:
        The nginx configuration text.
    """
    paths = None
    if record.tls_mode.has_certificate:
        paths = cert_paths or certificate_paths(record)

    lines = [
        f"# nginx site configuration for {record.domain}",
        "# generated by esc-deploy and replaced on every deployment",
        "",
    ]
    lines.extend(_http_context(record.security_enabled))
    if record.security_enabled:
        lines.append("")
        lines.extend(_default_server(paths))
    if paths is not None:
        lines.append("")
        lines.extend(_redirect_server(record))
    lines.append("")
    lines.extend(_application_server(record, paths, client_max_body_size, proxy_timeout))
    return "\n".join(lines) + "\n"


def reverse_proxy_installed(record, platform, ctx) -> bool:
    return platform.package_is_installed(REVERSE_PROXY_PACKAGE)


def install_reverse_proxy(record, platform, ctx) -> Tuple[InstallerResult, str]:
    if not platform.install_package([REVERSE_PROXY_PACKAGE]):
        return InstallerResult.FAILURE, f"Unable to install {REVERSE_PROXY_PACKAGE}"
    return InstallerResult.SUCCESS, f"{REVERSE_PROXY_PACKAGE} installed"


def reverse_proxy_active(record, platform, ctx) -> bool:
    err, _ = platform.run_process(["systemctl", "is-active", "--quiet", "nginx"], privileged=True)
    return err == 0


def configure_reverse_proxy(record, platform, ctx) -> Tuple[InstallerResult, str]:
    """Write and enable the site, test it, then restart nginx."""
    if not platform.write_file(NGINX_SITE_PATH, render(record, ctx.cert_paths), mode=0o644):
        return InstallerResult.FAILURE, f"Unable to write {NGINX_SITE_PATH}"

    for command in (
        ["ln", "-sf", NGINX_SITE_PATH, NGINX_SITE_LINK_PATH],
        ["rm", "-f", NGINX_DEFAULT_SITE_LINK_PATH],
    ):
        err, out = platform.run_process(command, privileged=True)
        if err != 0:
            return InstallerResult.FAILURE, f"{' '.join(command)} failed: {' '.join(out)}"

    err, out = platform.run_process(["nginx", "-t"], privileged=True)
    if err != 0:
        for line in out:
            InstallerLogger.error(line)
        return InstallerResult.FAILURE, "nginx rejected the generated configuration"

    for action in ("restart", "enable"):
        err, out = platform.run_process(["systemctl", action, "nginx"], privileged=True)
        if err != 0:
            return InstallerResult.FAILURE, f"systemctl {action} nginx failed: {' '.join(out)}"

    return InstallerResult.SUCCESS, f"Site configuration written to {NGINX_SITE_PATH}"
