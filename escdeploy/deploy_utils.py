#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Small helpers shared by the deployment and control commands."""

import contextlib
import logging
import os
import sys

from collections.abc import Iterable
from tempfile import NamedTemporaryFile

LOG_LEVELS = {
    'CRITICAL': logging.CRITICAL,
    'ERROR': logging.ERROR,
    'WARNING': logging.WARNING,
    'INFO': logging.INFO,
    'DEBUG': logging.DEBUG,
}


###################################################################################################
def eprint(*args, **kwargs):
    print(*args, file=sys.stderr, **kwargs)


###################################################################################################
# VERBOSE=3 and VERBOSE=-vvv both mean three -v flags
def get_verbosity_env_var_count(var_name):
    value = os.getenv(var_name, "") if var_name else ""
    if value.isdigit():
        return int(value)
    if value.startswith("-") and set(value[1:]) <= {"v"}:
        return len(value) - 1
    return 0


def set_logging(
    log_level_str,
    flag_level_count,
    set_traceback_limit=False,
    logfmt='%(asctime)s %(levelname)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
):
    """
    Configure the root logger from a level name (e.g. LOGLEVEL=info) and/or a count of -v flags.

    Whichever of the two is more verbose wins. Returns the effective level.
    """
    flag_level = max(logging.NOTSET, logging.CRITICAL - (10 * flag_level_count))
    if log_level_str:
        log_level = min(flag_level, LOG_LEVELS.get(log_level_str.strip().upper(), logging.CRITICAL))
    else:
        log_level = flag_level

    logging.basicConfig(level=log_level, format=logfmt, datefmt=datefmt)

    # full tracebacks only at debug level
    if set_traceback_limit and (log_level > logging.DEBUG):
        sys.tracebacklimit = 0

    return log_level


###################################################################################################
# commands may be given as nested lists; strings are never split
def flatten(coll):
    for i in coll:
        if isinstance(i, Iterable) and not isinstance(i, str):
            yield from flatten(i)
        else:
            yield i


def get_iterable(x):
    return x if isinstance(x, Iterable) and not isinstance(x, str) else (x,)


###################################################################################################
TRUE_STRINGS = ("yes", "true", "t", "y", "1")
FALSE_STRINGS = ("no", "false", "f", "n", "0", "")


def str2bool(v):
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        if v.strip().lower() in TRUE_STRINGS:
            return True
        if v.strip().lower() in FALSE_STRINGS:
            return False
    elif not v:
        return False
    raise ValueError("Boolean value expected")


def bool_to_str(v):
    return ("true" if v else "false") if isinstance(v, bool) else str(v)


###################################################################################################
def sizeof_fmt(num, suffix='B'):
    for unit in ['', 'Ki', 'Mi', 'Gi', 'Ti']:
        if abs(num) < 1024.0:
            return f"{num:3.1f}{unit}{suffix}"
        num /= 1024.0
    return f"{num:.1f}Pi{suffix}"


###################################################################################################
# yields a closed temporary file's name; the file is removed on exit
@contextlib.contextmanager
def temporary_filename(suffix=None):
    with NamedTemporaryFile(suffix=suffix, delete=False) as f:
        tmp_name = f.name
    try:
        yield tmp_name
    finally:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)


###################################################################################################
# None when the file doesn't exist
def file_contents(filename, encoding="utf-8"):
    if not os.path.isfile(filename):
        return None
    with open(filename, "r", encoding=encoding) as f:
        return f.read()
