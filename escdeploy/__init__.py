#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Provisioning workflow for the ESC web application stack on a single VM."""

__version__ = "1.0.0"
