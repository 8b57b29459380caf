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
Exceptions raised by the odometry core

Sensor-quality problems never raise. They are reported through motion
status values and diagnostics instead.
"""


class OdometryError(Exception):
    """Base class for odometry errors"""


class OdometryPreconditionError(OdometryError):
    """A caller violated a frame processing precondition"""


class ExtrinsicsUnavailableError(OdometryError):
    """No transform between the base frame and a sensor frame is known"""


class ProcessorLoadError(OdometryError):
    """The configured frame processor factory could not be loaded"""
