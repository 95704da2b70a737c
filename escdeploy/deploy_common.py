#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

import getpass
import os
import sys

from enum import IntFlag, auto

import requests
from dotenv import dotenv_values
from ruamel.yaml import YAML

from escdeploy.deploy_constants import OS_RELEASE_FILE
from escdeploy.deploy_utils import eprint, sizeof_fmt, str2bool


###################################################################################################
class UserInputDefaultsBehavior(IntFlag):
    DefaultsPrompt = auto()
    DefaultsAccept = auto()
    DefaultsNonInteractive = auto()


###################################################################################################
# get interactive user response to Y/N question
def YesOrNo(
    question,
    default=None,
    defaultBehavior=UserInputDefaultsBehavior.DefaultsPrompt | UserInputDefaultsBehavior.DefaultsAccept,
):
    if (default is not None) and (
        (defaultBehavior & UserInputDefaultsBehavior.DefaultsAccept)
        and (defaultBehavior & UserInputDefaultsBehavior.DefaultsNonInteractive)
    ):
        return str2bool(default)

    if (default is not None) and defaultBehavior & UserInputDefaultsBehavior.DefaultsPrompt:
        questionStr = f"\n{question} ({'Y / n' if str2bool(default) else 'y / N'}): "
    else:
        questionStr = f"\n{question} (Y / N): "

    while True:
        reply = str(input(questionStr)).lower().strip()
        if len(reply) > 0:
            try:
                return str2bool(reply)
            except ValueError:
                pass
        elif (defaultBehavior & UserInputDefaultsBehavior.DefaultsAccept) and (default is not None):
            return str2bool(default)


###################################################################################################
# get interactive user response
def AskForString(
    question,
    default=None,
    defaultBehavior=UserInputDefaultsBehavior.DefaultsPrompt | UserInputDefaultsBehavior.DefaultsAccept,
):
    if (default is not None) and (
        (defaultBehavior & UserInputDefaultsBehavior.DefaultsAccept)
        and (defaultBehavior & UserInputDefaultsBehavior.DefaultsNonInteractive)
    ):
        return default

    reply = str(
        input(
            f"\n{question}{f' [{default}]' if default and (defaultBehavior & UserInputDefaultsBehavior.DefaultsPrompt) else ''}: "
        )
    ).strip()
    if (len(reply) == 0) and (default is not None) and (defaultBehavior & UserInputDefaultsBehavior.DefaultsAccept):
        reply = default

    return reply


def AskForPassword(prompt):
    return getpass.getpass(prompt=f"\n{prompt}: ")


###################################################################################################
# Choose one of many.
# choices - an iterable of (tag, item, status) tuples where status specifies the initial
# selected/unselected state of each entry. No more than one entry should be set to True.
def ChooseOne(
    prompt,
    choices=[],
    defaultBehavior=UserInputDefaultsBehavior.DefaultsPrompt | UserInputDefaultsBehavior.DefaultsAccept,
):
    validChoices = [x for x in choices if len(x) == 3 and isinstance(x[0], str) and isinstance(x[2], bool)]
    defaulted = next(iter([x for x in validChoices if x[2] is True]), None)

    if (defaultBehavior & UserInputDefaultsBehavior.DefaultsAccept) and (
        defaultBehavior & UserInputDefaultsBehavior.DefaultsNonInteractive
    ):
        return defaulted[0] if defaulted is not None else ""

    print(f"\n{prompt}")
    index = 0
    for choice in validChoices:
        index = index + 1
        print(f"  {index}) {choice[1] if isinstance(choice[1], str) and len(choice[1]) > 0 else choice[0]}")

    while True:
        inputRaw = input(
            f"Select option [{'/'.join(str(i + 1) for i in range(len(validChoices)))}]{f' ({validChoices.index(defaulted) + 1})' if (defaulted is not None) and (defaultBehavior & UserInputDefaultsBehavior.DefaultsPrompt) else ''}: "
        ).strip()
        if (
            (len(inputRaw) == 0)
            and (defaulted is not None)
            and (defaultBehavior & UserInputDefaultsBehavior.DefaultsAccept)
        ):
            return defaulted[0]
        elif (len(inputRaw) > 0) and inputRaw.isnumeric():
            inputIndex = int(inputRaw) - 1
            if inputIndex > -1 and inputIndex < len(validChoices):
                return validChoices[inputIndex][0]
        elif inputRaw in [x[0] for x in validChoices]:
            return inputRaw


###################################################################################################
def LoadYaml(inputFileName):
    result = None
    if inputFileName and os.path.isfile(inputFileName):
        with open(inputFileName, 'r') as f:
            inYaml = YAML(typ='rt')
            inYaml.preserve_quotes = True
            inYaml.width = sys.maxsize
            result = inYaml.load(f)
    return result


# the names of the services declared in a docker compose file
def GetComposeServiceNames(composeFileName):
    composeData = LoadYaml(composeFileName)
    if isinstance(composeData, dict) and isinstance(services := composeData.get('services'), dict):
        return list(services.keys())
    return []


###################################################################################################
# the ID/NAME/VERSION_ID fields of /etc/os-release as a dict
def GetOsRelease(osReleaseFileName=OS_RELEASE_FILE):
    if os.path.isfile(osReleaseFileName):
        return {k: v for k, v in dotenv_values(osReleaseFileName).items() if v is not None}
    return {}


###################################################################################################
def DownloadToFile(url, local_filename, debug=False):
    r = requests.get(url, stream=True, allow_redirects=True, timeout=60)
    r.raise_for_status()
    with open(local_filename, 'wb') as f:
        for chunk in r.iter_content(chunk_size=1024):
            if chunk:
                f.write(chunk)
    fExists = os.path.isfile(local_filename)
    fSize = os.path.getsize(local_filename) if fExists else 0
    if debug:
        eprint(f"Download of {url} to {local_filename} {'succeeded' if fExists else 'failed'} ({sizeof_fmt(fSize)})")
    return fExists and (fSize > 0)
