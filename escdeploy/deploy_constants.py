#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

import os

###################################################################################################
PLATFORM_LINUX = "Linux"
PLATFORM_LINUX_DEBIAN = "debian"
PLATFORM_LINUX_UBUNTU = "ubuntu"
SUPPORTED_DISTROS = (PLATFORM_LINUX_DEBIAN, PLATFORM_LINUX_UBUNTU)
OS_RELEASE_FILE = "/etc/os-release"

###################################################################################################
# application install directory and the files it holds
DEFAULT_INSTALL_PATH = "/opt/apps/esc"
INSTALL_PATH_ENV_VAR = "APP_DIR"
SETTINGS_FILE_NAME = ".deployment_config"
ENV_FILE_NAME = ".env.docker"
ENV_FILE_BACKUP_SUFFIX_FORMAT = "%Y%m%d_%H%M%S"
COMPOSE_FILE_NAME = "compose.prod.yaml"
EDITOR_ENV_VAR = "EDITOR"
DEFAULT_EDITOR = "nano"

###################################################################################################
# application source and image
SOURCE_REPOSITORY_URL = "https://github.com/andreas-tuko/esc-compose-prod.git"
APPLICATION_IMAGE = "andreastuko/esc:latest"
DOCKER_INSTALL_SCRIPT_URL = "https://get.docker.com/"
SERVICE_ACCOUNT_NAME = "deployer"
SERVICE_ACCOUNT_SHELL = "/bin/bash"

###################################################################################################
# system packages
BASELINE_PACKAGES = ["curl", "wget", "git", "ufw", "nano", "jq", "mailutils", "sendmail"]
COMPOSE_PLUGIN_PACKAGE = "docker-compose-plugin"
REVERSE_PROXY_PACKAGE = "nginx"
CERT_ISSUER_PACKAGES = ["certbot", "python3-certbot-nginx"]
INTRUSION_PREVENTION_PACKAGE = "fail2ban"
# journal backend for the sshd jail
INTRUSION_PREVENTION_JOURNAL_PACKAGE = "python3-systemd"

###################################################################################################
# systemd
SYSTEMD_UNIT_NAME = "esc.service"
SYSTEMD_UNIT_PATH = os.path.join("/etc/systemd/system", SYSTEMD_UNIT_NAME)

###################################################################################################
# nginx
NGINX_SITE_NAME = "esc"
NGINX_SITES_AVAILABLE_DIR = "/etc/nginx/sites-available"
NGINX_SITES_ENABLED_DIR = "/etc/nginx/sites-enabled"
NGINX_SITE_PATH = os.path.join(NGINX_SITES_AVAILABLE_DIR, NGINX_SITE_NAME)
NGINX_SITE_LINK_PATH = os.path.join(NGINX_SITES_ENABLED_DIR, NGINX_SITE_NAME)
NGINX_DEFAULT_SITE_LINK_PATH = os.path.join(NGINX_SITES_ENABLED_DIR, "default")
NGINX_ACCESS_LOG = "/var/log/nginx/esc_access.log"
NGINX_ERROR_LOG = "/var/log/nginx/esc_error.log"
NGINX_CDN_BLOCKED_LOG = "/var/log/nginx/esc_cdn_blocked.log"
NGINX_UPSTREAM_NAME = "django_app"
UPSTREAM_HOST = "127.0.0.1"
UPSTREAM_PORT = 8000
UPSTREAM_KEEPALIVE = 64
CLIENT_MAX_BODY_SIZE_DEFAULT = "100M"
PROXY_TIMEOUT_DEFAULT = "600s"
ACME_WEBROOT = "/var/www/html"

###################################################################################################
# certificate material
LETSENCRYPT_LIVE_DIR = "/etc/letsencrypt/live"
SELF_SIGNED_DIR = "/etc/nginx/ssl"
SELF_SIGNED_KEY_PATH = os.path.join(SELF_SIGNED_DIR, "selfsigned.key")
SELF_SIGNED_CERT_PATH = os.path.join(SELF_SIGNED_DIR, "selfsigned.crt")
SELF_SIGNED_DHPARAM_PATH = os.path.join(SELF_SIGNED_DIR, "dhparam.pem")
SELF_SIGNED_VALID_DAYS = 365
SELF_SIGNED_KEY_BITS = 2048
SELF_SIGNED_SUBJECT_PREFIX = "/C=KE/ST=Nairobi/L=Nairobi/O=ESC/CN="
CERT_RENEWAL_CRON_ENTRY = "0 3 * * * certbot renew --quiet --post-hook 'systemctl reload nginx'"

###################################################################################################
# fail2ban
FAIL2BAN_JAIL_PATH = "/etc/fail2ban/jail.local"
FAIL2BAN_FILTER_DIR = "/etc/fail2ban/filter.d"
FAIL2BAN_CUSTOM_LOG = "/var/log/fail2ban-custom.log"
FAIL2BAN_LOGROTATE_PATH = "/etc/logrotate.d/fail2ban-custom"

###################################################################################################
# firewall
FIREWALL_ALLOWED_TCP_PORTS = (22, 80, 443)

###################################################################################################
# operator helper commands
HELPER_BIN_DIR = "/opt/bin"
SECURITY_DASHBOARD_PATH = os.path.join(HELPER_BIN_DIR, "f2b-dashboard.sh")
SECURITY_UNBAN_PATH = os.path.join(HELPER_BIN_DIR, "f2b-unban.sh")

###################################################################################################
# application launch
READINESS_POLL_ATTEMPTS = 12
READINESS_POLL_INTERVAL_SEC = 5
