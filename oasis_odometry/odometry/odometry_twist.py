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
Base frame velocity from a frame-to-frame sensor motion
"""

from __future__ import annotations

import numpy as np

from oasis_odometry.odometry.odometry_types import COVARIANCE_DIM
from oasis_odometry.odometry.odometry_types import Twist
from oasis_odometry.odometry.rigid_transform import RigidTransform


def motion_in_base_frame(
    motion: RigidTransform, base_to_sensor: RigidTransform
) -> RigidTransform:
    """
    Express a sensor frame motion in the base frame

    The same extrinsics are used for both ends of the motion, which is only
    exact for sensors rigidly mounted on the base.
    """

    return base_to_sensor @ motion @ base_to_sensor.inverse()


def derive_twist(
    motion: RigidTransform,
    base_to_sensor: RigidTransform,
    motion_covariance: np.ndarray,
    dt_sec: float,
) -> Twist:
    """
    Compute the base velocity over an interval of dt_sec seconds

    Args:
        motion: Sensor motion between the two frames
        base_to_sensor: Base to sensor extrinsics at the later frame
        motion_covariance: 6x6 motion covariance from the frame processor
        dt_sec: Elapsed time in seconds, expected > 0

    Returns:
        The twist. Its covariance is the transposed motion covariance without
        any rescaling by dt.
    """

    if dt_sec <= 0.0:
        raise ValueError(f"Twist interval must be positive, got {dt_sec}")

    delta_base: RigidTransform = motion_in_base_frame(motion, base_to_sensor)

    linear_mps: np.ndarray = delta_base.translation_m / dt_sec

    axis: np.ndarray
    angle_rad: float
    axis, angle_rad = delta_base.axis_angle()
    angular_rps: np.ndarray = axis * angle_rad / dt_sec

    covariance: np.ndarray = (
        np.asarray(motion_covariance, dtype=float)
        .reshape(COVARIANCE_DIM, COVARIANCE_DIM)
        .T.copy()
    )

    return Twist(
        linear_mps=linear_mps,
        angular_rps=angular_rps,
        covariance=covariance,
    )
