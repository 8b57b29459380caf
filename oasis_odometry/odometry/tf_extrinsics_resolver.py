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
Extrinsics resolver backed by the ROS transform tree
"""

from __future__ import annotations

import rclpy.time
import tf2_ros
from geometry_msgs.msg import TransformStamped as TransformStampedMsg

from oasis_odometry.odometry.odometry_errors import ExtrinsicsUnavailableError
from oasis_odometry.odometry.rigid_transform import RigidTransform
from oasis_odometry.odometry.ros_conversions import transform_from_ros


class TfExtrinsicsResolver:
    """
    Resolve base to sensor transforms from a tf2 buffer

    Sensor mounts are treated as static, so the latest transform in the
    buffer is used whatever the frame timestamp. Lookups never wait, a
    transform that is not in the buffer yet is reported as unavailable.
    """

    def __init__(self, tf_buffer: tf2_ros.Buffer, base_frame_id: str) -> None:
        self._tf_buffer: tf2_ros.Buffer = tf_buffer
        self._base_frame_id: str = base_frame_id

    def resolve(self, timestamp: float, sensor_frame_id: str) -> RigidTransform:
        if sensor_frame_id == self._base_frame_id:
            return RigidTransform.identity()

        try:
            # Time zero selects the latest available transform
            transform: TransformStampedMsg = self._tf_buffer.lookup_transform(
                self._base_frame_id, sensor_frame_id, rclpy.time.Time()
            )
        except tf2_ros.TransformException as exc:
            raise ExtrinsicsUnavailableError(str(exc)) from exc

        return transform_from_ros(transform.transform)
