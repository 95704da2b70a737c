#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

# deployment
KEY_CONFIG_ITEM_DOMAIN_NAME = "domainName"
KEY_CONFIG_ITEM_REGISTRY_USERNAME = "registryUsername"
KEY_CONFIG_ITEM_INSTALL_PATH = "installPath"

# tls
KEY_CONFIG_ITEM_TLS_MODE = "tlsMode"
KEY_CONFIG_ITEM_TLS_CONTACT_EMAIL = "tlsContactEmail"

# security profile
KEY_CONFIG_ITEM_SECURITY_ENABLED = "securityEnabled"
KEY_CONFIG_ITEM_SECURITY_CONTACT_EMAIL = "securityContactEmail"

# the variable names used for each item in the saved settings file
SETTINGS_FILE_VARIABLES = {
    KEY_CONFIG_ITEM_DOMAIN_NAME: "DOMAIN_NAME",
    KEY_CONFIG_ITEM_REGISTRY_USERNAME: "DOCKER_USERNAME",
    KEY_CONFIG_ITEM_INSTALL_PATH: "APP_DIR",
    KEY_CONFIG_ITEM_TLS_MODE: "SETUP_SSL",
    KEY_CONFIG_ITEM_TLS_CONTACT_EMAIL: "SSL_EMAIL",
    KEY_CONFIG_ITEM_SECURITY_ENABLED: "SECURITY_ENABLED",
    KEY_CONFIG_ITEM_SECURITY_CONTACT_EMAIL: "ADMIN_EMAIL",
}
