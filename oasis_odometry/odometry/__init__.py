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
ROS-agnostic pose chain integration for visual odometry
"""

from __future__ import annotations

from oasis_odometry.odometry.odometry_config import OdometryConfig
from oasis_odometry.odometry.odometry_types import MotionEstimate
from oasis_odometry.odometry.odometry_types import MotionStatus
from oasis_odometry.odometry.odometry_types import OdometryResult
from oasis_odometry.odometry.pose_integrator import PoseIntegrator
from oasis_odometry.odometry.rigid_transform import RigidTransform


__all__ = [
    "MotionEstimate",
    "MotionStatus",
    "OdometryConfig",
    "OdometryResult",
    "PoseIntegrator",
    "RigidTransform",
]
