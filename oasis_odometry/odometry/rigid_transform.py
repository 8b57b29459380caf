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
Rigid-body transform used for every link of the odometry pose chain
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence
from typing import Tuple

import numpy as np

from oasis_odometry.odometry.se3 import is_finite_vector
from oasis_odometry.odometry.se3 import quat_conjugate
from oasis_odometry.odometry.se3 import quat_from_rpy
from oasis_odometry.odometry.se3 import quat_multiply
from oasis_odometry.odometry.se3 import quat_normalize
from oasis_odometry.odometry.se3 import quat_rotate
from oasis_odometry.odometry.se3 import quat_to_axis_angle
from oasis_odometry.odometry.se3 import quat_to_rotmat
from oasis_odometry.odometry.se3 import rotmat_to_quat


@dataclass(frozen=True, eq=False)
class RigidTransform:
    """
    Rotation plus translation in 3D

    A transform T_AB maps points from frame B into frame A with
    p_A = R_AB * p_B + t_AB. Composition follows the usual convention,
    T_AC = T_AB.compose(T_BC), also written T_AB @ T_BC.

    Fields:
        translation_m: Translation in meters, XYZ order
        rotation_wxyz: Unit quaternion rotation in wxyz order
    """

    translation_m: np.ndarray
    rotation_wxyz: np.ndarray

    def __post_init__(self) -> None:
        translation: np.ndarray = np.array(self.translation_m, dtype=float).reshape(3)
        rotation: np.ndarray = quat_normalize(
            np.array(self.rotation_wxyz, dtype=float).reshape(4)
        )
        translation.setflags(write=False)
        rotation.setflags(write=False)
        object.__setattr__(self, "translation_m", translation)
        object.__setattr__(self, "rotation_wxyz", rotation)

    @classmethod
    def identity(cls) -> RigidTransform:
        return cls(
            translation_m=np.zeros(3, dtype=float),
            rotation_wxyz=np.array([1.0, 0.0, 0.0, 0.0], dtype=float),
        )

    @classmethod
    def from_translation_rpy(
        cls,
        translation_m: Sequence[float],
        roll: float = 0.0,
        pitch: float = 0.0,
        yaw: float = 0.0,
    ) -> RigidTransform:
        """
        Build a transform from a translation and roll, pitch, yaw in radians
        """

        return cls(
            translation_m=np.asarray(translation_m, dtype=float),
            rotation_wxyz=quat_from_rpy(roll, pitch, yaw),
        )

    @classmethod
    def from_matrix(cls, matrix: np.ndarray) -> RigidTransform:
        """
        Build a transform from a 4x4 homogeneous matrix
        """

        m: np.ndarray = np.asarray(matrix, dtype=float)
        if m.shape != (4, 4):
            raise ValueError(f"Expected a 4x4 matrix, got shape {m.shape}")
        return cls(translation_m=m[0:3, 3], rotation_wxyz=rotmat_to_quat(m[0:3, 0:3]))

    def to_matrix(self) -> np.ndarray:
        matrix: np.ndarray = np.eye(4, dtype=float)
        matrix[0:3, 0:3] = quat_to_rotmat(self.rotation_wxyz)
        matrix[0:3, 3] = self.translation_m
        return matrix

    def compose(self, other: RigidTransform) -> RigidTransform:
        """
        Return self * other
        """

        return RigidTransform(
            translation_m=self.translation_m
            + quat_rotate(self.rotation_wxyz, other.translation_m),
            rotation_wxyz=quat_multiply(self.rotation_wxyz, other.rotation_wxyz),
        )

    def __matmul__(self, other: RigidTransform) -> RigidTransform:
        return self.compose(other)

    def inverse(self) -> RigidTransform:
        rotation_inv: np.ndarray = quat_conjugate(self.rotation_wxyz)
        return RigidTransform(
            translation_m=-quat_rotate(rotation_inv, self.translation_m),
            rotation_wxyz=rotation_inv,
        )

    def transform_point(self, point: Sequence[float]) -> np.ndarray:
        return self.translation_m + quat_rotate(
            self.rotation_wxyz, np.asarray(point, dtype=float)
        )

    def scale_translation(self, factor: float) -> RigidTransform:
        """
        Return a copy with the translation multiplied by a scalar factor
        """

        return RigidTransform(
            translation_m=self.translation_m * float(factor),
            rotation_wxyz=self.rotation_wxyz,
        )

    def axis_angle(self) -> Tuple[np.ndarray, float]:
        """
        Return the rotation as a unit axis and an angle in radians
        """

        return quat_to_axis_angle(self.rotation_wxyz)

    def components(self) -> Tuple[float, ...]:
        """
        Translation x, y, z followed by rotation x, y, z, w
        """

        return (
            float(self.translation_m[0]),
            float(self.translation_m[1]),
            float(self.translation_m[2]),
            float(self.rotation_wxyz[1]),
            float(self.rotation_wxyz[2]),
            float(self.rotation_wxyz[3]),
            float(self.rotation_wxyz[0]),
        )

    def is_finite(self) -> bool:
        return is_finite_vector(self.components())
