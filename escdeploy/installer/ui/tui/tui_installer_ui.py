#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Terminal UI implementation for the installer."""

from typing import List, Tuple

from escdeploy.deploy_common import AskForPassword, AskForString, ChooseOne, YesOrNo
from escdeploy.installer.ui.shared.installer_ui import InstallerUI
from escdeploy.installer.utils.logger_utils import InstallerLogger


class TUIInstallerUI(InstallerUI):
    """Terminal UI implementation using deploy_common prompts."""

    def ask_yes_no(self, message: str, default: bool = True) -> bool:
        return YesOrNo(message, default=default)

    def ask_string(self, prompt: str, default: str = "") -> str:
        return AskForString(prompt, default=default)

    def ask_password(self, prompt: str) -> str:
        return AskForPassword(prompt)

    def ask_choice(self, prompt: str, choices: List[Tuple[str, str]], default: str) -> str:
        return ChooseOne(prompt, choices=[(tag, desc, tag == default) for tag, desc in choices])

    def display_message(self, message: str) -> None:
        print(f"\n{message}")

    def display_error(self, message: str) -> None:
        InstallerLogger.error(message)
