#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.


from enum import Enum, auto


# Used primarily for getting status from discrete steps during the installer and subsequently logging
class InstallerResult(Enum):
    """Return status for an installation step."""

    SUCCESS = auto()
    FAILURE = auto()
    SKIPPED = auto()


#####################################################
# ConfigItem Enums
#####################################################


# TLS certificate acquisition mode; values are the ones written to the saved settings file
class TlsMode(Enum):
    ISSUED = "letsencrypt"
    SELF_SIGNED = "selfsigned"
    NONE = "none"

    @classmethod
    def parse(cls, value) -> "TlsMode":
        """Accept an enum member, a stored value, or a descriptive alias."""
        if isinstance(value, cls):
            return value
        normalized = str(value or "").strip().lower().replace("-", "_")
        aliases = {
            "letsencrypt": cls.ISSUED,
            "issued": cls.ISSUED,
            "1": cls.ISSUED,
            "selfsigned": cls.SELF_SIGNED,
            "self_signed": cls.SELF_SIGNED,
            "2": cls.SELF_SIGNED,
            "none": cls.NONE,
            "3": cls.NONE,
            "": cls.NONE,
        }
        if normalized in aliases:
            return aliases[normalized]
        raise ValueError(f"Unknown TLS mode: {value}")

    @property
    def has_certificate(self) -> bool:
        return self is not TlsMode.NONE

    def describe(self) -> str:
        return {
            TlsMode.ISSUED: "Let's Encrypt",
            TlsMode.SELF_SIGNED: "Self-signed certificate",
            TlsMode.NONE: "None (CDN terminates TLS)",
        }[self]
