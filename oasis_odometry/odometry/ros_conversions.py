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
ROS message conversions for odometry types
"""

from __future__ import annotations

from typing import Optional
from typing import Sequence

import numpy as np
from builtin_interfaces.msg import Time as TimeMsg
from diagnostic_msgs.msg import DiagnosticArray as DiagnosticArrayMsg
from diagnostic_msgs.msg import DiagnosticStatus as DiagnosticStatusMsg
from diagnostic_msgs.msg import KeyValue as KeyValueMsg
from geometry_msgs.msg import Point as PointMsg
from geometry_msgs.msg import Pose as PoseMsg
from geometry_msgs.msg import PoseStamped as PoseStampedMsg
from geometry_msgs.msg import Quaternion as QuaternionMsg
from geometry_msgs.msg import Transform as TransformMsg
from geometry_msgs.msg import TransformStamped as TransformStampedMsg
from geometry_msgs.msg import Vector3 as Vector3Msg
from nav_msgs.msg import Odometry as OdometryMsg
from sensor_msgs.msg import CameraInfo as CameraInfoMsg

from oasis_odometry.odometry.odometry_diagnostics import diagnostics_key_values
from oasis_odometry.odometry.odometry_types import CameraIntrinsics
from oasis_odometry.odometry.odometry_types import MotionStatus
from oasis_odometry.odometry.odometry_types import OdometryDiagnostics
from oasis_odometry.odometry.odometry_types import Twist
from oasis_odometry.odometry.rigid_transform import RigidTransform


# Nanoseconds per second for converting ROS timestamps
_NS_PER_S: int = 1_000_000_000

# Meters per millimeter for integer depth images
_M_PER_MM: float = 0.001


def stamp_to_seconds(stamp: TimeMsg) -> float:
    return float(stamp.sec) + float(stamp.nanosec) / _NS_PER_S


def seconds_to_stamp(seconds: float) -> TimeMsg:
    total_ns: int = int(round(seconds * _NS_PER_S))
    sec, nanosec = divmod(total_ns, _NS_PER_S)
    return TimeMsg(sec=sec, nanosec=nanosec)


def camera_info_to_intrinsics(info: CameraInfoMsg) -> CameraIntrinsics:
    """
    Convert camera info to intrinsics at the reduced (binned) resolution
    """

    binning_x: int = max(int(info.binning_x), 1)
    binning_y: int = max(int(info.binning_y), 1)

    return CameraIntrinsics(
        fx=float(info.k[0]) / binning_x,
        fy=float(info.k[4]) / binning_y,
        cx=float(info.k[2]) / binning_x,
        cy=float(info.k[5]) / binning_y,
        width=int(info.width) // binning_x,
        height=int(info.height) // binning_y,
    )


def transform_from_ros(transform: TransformMsg) -> RigidTransform:
    return RigidTransform(
        translation_m=np.array(
            [transform.translation.x, transform.translation.y, transform.translation.z],
            dtype=float,
        ),
        rotation_wxyz=np.array(
            [
                transform.rotation.w,
                transform.rotation.x,
                transform.rotation.y,
                transform.rotation.z,
            ],
            dtype=float,
        ),
    )


def transform_to_ros_pose(transform: RigidTransform) -> PoseMsg:
    pose: PoseMsg = PoseMsg()
    pose.position = PointMsg(
        x=float(transform.translation_m[0]),
        y=float(transform.translation_m[1]),
        z=float(transform.translation_m[2]),
    )
    pose.orientation = _quaternion_msg(transform.rotation_wxyz)
    return pose


def transform_to_ros_transform(transform: RigidTransform) -> TransformMsg:
    message: TransformMsg = TransformMsg()
    message.translation = _vector3_msg(transform.translation_m)
    message.rotation = _quaternion_msg(transform.rotation_wxyz)
    return message


def to_transform_stamped(
    *, stamp: TimeMsg, parent: str, child: str, transform: RigidTransform
) -> TransformStampedMsg:
    message: TransformStampedMsg = TransformStampedMsg()
    message.header.stamp = stamp
    message.header.frame_id = parent
    message.child_frame_id = child
    message.transform = transform_to_ros_transform(transform)
    return message


def build_pose_stamped(
    *, stamp: TimeMsg, frame_id: str, transform: RigidTransform
) -> PoseStampedMsg:
    message: PoseStampedMsg = PoseStampedMsg()
    message.header.stamp = stamp
    message.header.frame_id = frame_id
    message.pose = transform_to_ros_pose(transform)
    return message


def build_odometry(
    *,
    stamp: TimeMsg,
    odom_frame_id: str,
    base_link_frame_id: str,
    pose: Optional[RigidTransform],
    twist: Optional[Twist],
) -> OdometryMsg:
    """
    Build an odometry message, leaving missing parts zeroed
    """

    message: OdometryMsg = OdometryMsg()
    message.header.stamp = stamp
    message.header.frame_id = odom_frame_id
    message.child_frame_id = base_link_frame_id

    if pose is not None:
        message.pose.pose = transform_to_ros_pose(pose)

    if twist is not None:
        message.twist.twist.linear = _vector3_msg(twist.linear_mps)
        message.twist.twist.angular = _vector3_msg(twist.angular_rps)
        message.twist.covariance = _flatten_row_major(twist.covariance)

    return message


def build_diagnostic_array(
    *,
    stamp: TimeMsg,
    name: str,
    hardware_id: str,
    diagnostics: OdometryDiagnostics,
) -> DiagnosticArrayMsg:
    status: DiagnosticStatusMsg = DiagnosticStatusMsg()
    status.name = name
    status.hardware_id = hardware_id
    status.message = diagnostics.status_description
    if diagnostics.status == MotionStatus.SUCCESS:
        status.level = DiagnosticStatusMsg.OK
    else:
        status.level = DiagnosticStatusMsg.WARN
    status.values = [
        KeyValueMsg(key=key, value=value)
        for key, value in diagnostics_key_values(diagnostics)
    ]

    message: DiagnosticArrayMsg = DiagnosticArrayMsg()
    message.header.stamp = stamp
    message.status = [status]
    return message


def depth_image_to_meters(depth: np.ndarray, encoding: str) -> np.ndarray:
    """
    Convert a registered depth image to float32 meters

    Millimeter images (16UC1) map zero to NaN, which marks a missing reading
    in float images.

    Raises:
        ValueError: If the encoding is not a supported depth encoding
    """

    if encoding in ("16UC1", "mono16"):
        depth_m: np.ndarray = depth.astype(np.float32) * np.float32(_M_PER_MM)
        depth_m[depth == 0] = np.nan
        return depth_m

    if encoding == "32FC1":
        return np.asarray(depth, dtype=np.float32)

    raise ValueError(f"Unsupported depth encoding '{encoding}'")


def _vector3_msg(values: Sequence[float]) -> Vector3Msg:
    return Vector3Msg(x=float(values[0]), y=float(values[1]), z=float(values[2]))


def _quaternion_msg(values_wxyz: Sequence[float]) -> QuaternionMsg:
    return QuaternionMsg(
        x=float(values_wxyz[1]),
        y=float(values_wxyz[2]),
        z=float(values_wxyz[3]),
        w=float(values_wxyz[0]),
    )


def _flatten_row_major(matrix: np.ndarray) -> list[float]:
    return [float(value) for value in np.asarray(matrix, dtype=float).reshape(-1)]
