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
Quaternion and SE(3) math helpers for odometry pose chains
"""

from __future__ import annotations

import math
from typing import Iterable
from typing import Tuple

import numpy as np


# Units: unitless. Meaning: small-norm epsilon for quaternion normalization
# and axis extraction
_EPS: float = 1.0e-12


def quat_normalize(q_wxyz: np.ndarray) -> np.ndarray:
    """
    Normalize a quaternion in [w, x, y, z] order
    """

    norm: float = float(np.linalg.norm(q_wxyz))
    if not math.isfinite(norm):
        # Keep non-finite components visible to validity checks
        return np.asarray(q_wxyz, dtype=float)
    if norm < _EPS:
        return np.array([1.0, 0.0, 0.0, 0.0], dtype=float)
    return np.asarray(q_wxyz, dtype=float) / norm


def quat_multiply(q1_wxyz: np.ndarray, q2_wxyz: np.ndarray) -> np.ndarray:
    """
    Hamilton product q1 * q2 of quaternions in [w, x, y, z] order
    """

    q1: np.ndarray = np.asarray(q1_wxyz, dtype=float)
    q2: np.ndarray = np.asarray(q2_wxyz, dtype=float)

    scalar: float = float(q1[0] * q2[0] - np.dot(q1[1:4], q2[1:4]))
    vector: np.ndarray = q1[0] * q2[1:4] + q2[0] * q1[1:4] + np.cross(q1[1:4], q2[1:4])

    product: np.ndarray = np.empty(4, dtype=float)
    product[0] = scalar
    product[1:4] = vector
    return product


def quat_conjugate(q_wxyz: np.ndarray) -> np.ndarray:
    """
    Conjugate a quaternion in [w, x, y, z] order
    """

    return np.array(
        [float(q_wxyz[0]), -float(q_wxyz[1]), -float(q_wxyz[2]), -float(q_wxyz[3])],
        dtype=float,
    )


def quat_rotate(q_wxyz: np.ndarray, vector: np.ndarray) -> np.ndarray:
    """
    Rotate a 3D vector by a unit quaternion in [w, x, y, z] order
    """

    qw: float = float(q_wxyz[0])
    qx: float = float(q_wxyz[1])
    qy: float = float(q_wxyz[2])
    qz: float = float(q_wxyz[3])
    vx: float = float(vector[0])
    vy: float = float(vector[1])
    vz: float = float(vector[2])

    tx: float = 2.0 * (qy * vz - qz * vy)
    ty: float = 2.0 * (qz * vx - qx * vz)
    tz: float = 2.0 * (qx * vy - qy * vx)

    return np.array(
        [
            vx + qw * tx + (qy * tz - qz * ty),
            vy + qw * ty + (qz * tx - qx * tz),
            vz + qw * tz + (qx * ty - qy * tx),
        ],
        dtype=float,
    )


def quat_to_axis_angle(q_wxyz: np.ndarray) -> Tuple[np.ndarray, float]:
    """
    Decompose a quaternion into a unit axis and an angle in [0, pi]

    The zero rotation reports the X axis with a zero angle.
    """

    q_unit: np.ndarray = quat_normalize(q_wxyz)
    if q_unit[0] < 0.0:
        q_unit = -q_unit

    vector: np.ndarray = q_unit[1:4]
    sin_half: float = float(np.linalg.norm(vector))
    if sin_half < _EPS:
        return np.array([1.0, 0.0, 0.0], dtype=float), 0.0

    angle_rad: float = 2.0 * math.atan2(sin_half, float(q_unit[0]))
    return vector / sin_half, angle_rad


def quat_from_rpy(roll: float, pitch: float, yaw: float) -> np.ndarray:
    """
    Convert roll, pitch, yaw angles to a quaternion in [w, x, y, z] order
    """

    cr: float = math.cos(0.5 * roll)
    sr: float = math.sin(0.5 * roll)
    cp: float = math.cos(0.5 * pitch)
    sp: float = math.sin(0.5 * pitch)
    cy: float = math.cos(0.5 * yaw)
    sy: float = math.sin(0.5 * yaw)

    return np.array(
        [
            cr * cp * cy + sr * sp * sy,
            sr * cp * cy - cr * sp * sy,
            cr * sp * cy + sr * cp * sy,
            cr * cp * sy - sr * sp * cy,
        ],
        dtype=float,
    )


def quat_to_rotmat(q_wxyz: np.ndarray) -> np.ndarray:
    """
    Convert quaternion to 3x3 rotation matrix
    """

    q_unit: np.ndarray = quat_normalize(q_wxyz)
    w: float = float(q_unit[0])
    x: float = float(q_unit[1])
    y: float = float(q_unit[2])
    z: float = float(q_unit[3])

    return np.array(
        [
            [1.0 - 2.0 * (y * y + z * z), 2.0 * (x * y - w * z), 2.0 * (x * z + w * y)],
            [2.0 * (x * y + w * z), 1.0 - 2.0 * (x * x + z * z), 2.0 * (y * z - w * x)],
            [2.0 * (x * z - w * y), 2.0 * (y * z + w * x), 1.0 - 2.0 * (x * x + y * y)],
        ],
        dtype=float,
    )


def rotmat_to_quat(rot: np.ndarray) -> np.ndarray:
    """
    Convert a 3x3 rotation matrix to a quaternion in [w, x, y, z] order

    Uses Shepperd's method, branching on the largest diagonal term.
    """

    m: np.ndarray = np.asarray(rot, dtype=float)
    trace: float = float(m[0, 0] + m[1, 1] + m[2, 2])

    w: float
    x: float
    y: float
    z: float
    s: float
    if trace > 0.0:
        s = 0.5 / math.sqrt(trace + 1.0)
        w = 0.25 / s
        x = (m[2, 1] - m[1, 2]) * s
        y = (m[0, 2] - m[2, 0]) * s
        z = (m[1, 0] - m[0, 1]) * s
    elif m[0, 0] > m[1, 1] and m[0, 0] > m[2, 2]:
        s = 2.0 * math.sqrt(1.0 + m[0, 0] - m[1, 1] - m[2, 2])
        w = (m[2, 1] - m[1, 2]) / s
        x = 0.25 * s
        y = (m[0, 1] + m[1, 0]) / s
        z = (m[0, 2] + m[2, 0]) / s
    elif m[1, 1] > m[2, 2]:
        s = 2.0 * math.sqrt(1.0 + m[1, 1] - m[0, 0] - m[2, 2])
        w = (m[0, 2] - m[2, 0]) / s
        x = (m[0, 1] + m[1, 0]) / s
        y = 0.25 * s
        z = (m[1, 2] + m[2, 1]) / s
    else:
        s = 2.0 * math.sqrt(1.0 + m[2, 2] - m[0, 0] - m[1, 1])
        w = (m[1, 0] - m[0, 1]) / s
        x = (m[0, 2] + m[2, 0]) / s
        y = (m[1, 2] + m[2, 1]) / s
        z = 0.25 * s

    return quat_normalize(np.array([w, x, y, z], dtype=float))


def is_finite_vector(values: Iterable[float]) -> bool:
    """
    Check if all values in an iterable are finite
    """

    for value in values:
        if not math.isfinite(float(value)):
            return False
    return True
