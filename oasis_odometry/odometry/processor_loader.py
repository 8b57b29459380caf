################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""
Resolve a frame processor factory from a configured import path
"""

from __future__ import annotations

import importlib
import importlib.util
from types import ModuleType
from typing import Any
from typing import List
from typing import Mapping
from typing import Tuple

from oasis_odometry.odometry.frame_processor import FrameProcessorFactory
from oasis_odometry.odometry.odometry_errors import ProcessorLoadError


def load_processor_factory(import_path: str) -> FrameProcessorFactory:
    """
    Import a frame processor factory given as "package.module:attribute"

    The attribute may be a class or a function, it is called with the camera
    intrinsics and the processor options each time a processor is needed.

    Raises:
        ProcessorLoadError: If the path is malformed, the module cannot be
            found, or the attribute is missing or not callable
    """

    module_name, attr_path = _split_import_path(import_path)

    if importlib.util.find_spec(module_name.split(".", maxsplit=1)[0]) is None:
        raise ProcessorLoadError(f"Module '{module_name}' is not installed")

    try:
        module: ModuleType = importlib.import_module(module_name)
    except ImportError as exc:
        raise ProcessorLoadError(f"Failed to import '{module_name}': {exc}") from exc

    target: Any = module
    for attr_name in attr_path.split("."):
        if not hasattr(target, attr_name):
            raise ProcessorLoadError(
                f"Module '{module_name}' has no attribute '{attr_path}'"
            )
        target = getattr(target, attr_name)

    if not callable(target):
        raise ProcessorLoadError(f"'{import_path}' is not callable")

    return target


def parse_processor_options(entries: List[str]) -> Mapping[str, str]:
    """
    Parse "key=value" entries into processor options

    Keys and values are kept verbatim, surrounding whitespace aside.
    """

    options: dict[str, str] = {}
    for entry in entries:
        if not entry:
            continue
        key, separator, value = entry.partition("=")
        key = key.strip()
        if not separator or not key:
            raise ProcessorLoadError(f"Malformed processor option '{entry}'")
        options[key] = value.strip()
    return options


def _split_import_path(import_path: str) -> Tuple[str, str]:
    path: str = import_path.strip()
    if ":" in path:
        module_name, _, attr_path = path.partition(":")
    else:
        module_name, _, attr_path = path.rpartition(".")

    if not module_name or not attr_path:
        raise ProcessorLoadError(
            f"Expected a 'module:attribute' import path, got '{import_path}'"
        )
    return module_name, attr_path
