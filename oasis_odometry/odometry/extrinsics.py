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
Base to sensor extrinsics lookup
"""

from __future__ import annotations

from typing import Dict
from typing import Mapping
from typing import Optional
from typing import Protocol

from oasis_odometry.odometry.odometry_errors import ExtrinsicsUnavailableError
from oasis_odometry.odometry.rigid_transform import RigidTransform


class ExtrinsicsResolver(Protocol):
    """Source of the rigid transform from the base frame to a sensor frame."""

    def resolve(self, timestamp: float, sensor_frame_id: str) -> RigidTransform:
        """
        Look up the base to sensor transform without blocking

        Raises:
            ExtrinsicsUnavailableError: If no relation between the base frame
                and the sensor frame is known
        """
        ...


class StaticExtrinsicsResolver:
    """
    Extrinsics resolver backed by a fixed table of sensor mounts
    """

    def __init__(
        self,
        base_frame_id: str,
        transforms: Mapping[str, RigidTransform],
    ) -> None:
        self._base_frame_id: str = base_frame_id
        self._transforms: Dict[str, RigidTransform] = dict(transforms)

    def resolve(self, timestamp: float, sensor_frame_id: str) -> RigidTransform:
        if sensor_frame_id == self._base_frame_id:
            return RigidTransform.identity()

        transform: Optional[RigidTransform] = self._transforms.get(sensor_frame_id)
        if transform is None:
            raise ExtrinsicsUnavailableError(
                f"No transform from '{self._base_frame_id}' to '{sensor_frame_id}'"
            )
        return transform
