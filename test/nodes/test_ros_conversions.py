################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

from __future__ import annotations

import importlib.util
import math
import unittest

import numpy as np


def _module_available(module: str) -> bool:
    root: str = module.split(".", maxsplit=1)[0]
    if importlib.util.find_spec(root) is None:
        return False
    return importlib.util.find_spec(module) is not None


REQUIRED_MODULES: list[str] = [
    "builtin_interfaces.msg",
    "diagnostic_msgs.msg",
    "geometry_msgs.msg",
    "nav_msgs.msg",
    "sensor_msgs.msg",
]
missing: list[str] = [
    module for module in REQUIRED_MODULES if not _module_available(module)
]
if missing:
    raise unittest.SkipTest("ROS dependencies are unavailable: " + ", ".join(missing))

from builtin_interfaces.msg import Time as TimeMsg
from diagnostic_msgs.msg import DiagnosticArray as DiagnosticArrayMsg
from diagnostic_msgs.msg import DiagnosticStatus as DiagnosticStatusMsg
from geometry_msgs.msg import Transform as TransformMsg
from geometry_msgs.msg import TransformStamped as TransformStampedMsg
from nav_msgs.msg import Odometry as OdometryMsg
from sensor_msgs.msg import CameraInfo as CameraInfoMsg

from oasis_odometry.odometry.odometry_types import FrameStatistics
from oasis_odometry.odometry.odometry_types import MotionStatus
from oasis_odometry.odometry.odometry_types import OdometryDiagnostics
from oasis_odometry.odometry.odometry_types import Twist
from oasis_odometry.odometry.rigid_transform import RigidTransform
from oasis_odometry.odometry.ros_conversions import build_diagnostic_array
from oasis_odometry.odometry.ros_conversions import build_odometry
from oasis_odometry.odometry.ros_conversions import camera_info_to_intrinsics
from oasis_odometry.odometry.ros_conversions import depth_image_to_meters
from oasis_odometry.odometry.ros_conversions import seconds_to_stamp
from oasis_odometry.odometry.ros_conversions import stamp_to_seconds
from oasis_odometry.odometry.ros_conversions import to_transform_stamped
from oasis_odometry.odometry.ros_conversions import transform_from_ros


def _diagnostics(status: MotionStatus) -> OdometryDiagnostics:
    return OdometryDiagnostics(
        timestamp=1.0,
        status=status,
        status_description=status.description,
        first_run=False,
        statistics=FrameStatistics(num_keypoints=(10, 5)),
        runtime_sec=0.002,
    )


class TestRosConversions(unittest.TestCase):
    """Tests for odometry ROS message conversions"""

    def test_stamp_seconds(self) -> None:
        """Timestamps convert between messages and seconds"""
        stamp: TimeMsg = seconds_to_stamp(12.25)

        self.assertEqual(stamp.sec, 12)
        self.assertEqual(stamp.nanosec, 250_000_000)
        self.assertTrue(math.isclose(stamp_to_seconds(stamp), 12.25))

    def test_camera_info_binning(self) -> None:
        """Camera intrinsics are reduced by the binning factors"""
        info: CameraInfoMsg = CameraInfoMsg()
        info.width = 640
        info.height = 480
        info.binning_x = 2
        info.binning_y = 0
        info.k = [500.0, 0.0, 320.0, 0.0, 510.0, 240.0, 0.0, 0.0, 1.0]

        intrinsics = camera_info_to_intrinsics(info)

        self.assertAlmostEqual(intrinsics.fx, 250.0)
        self.assertAlmostEqual(intrinsics.cx, 160.0)
        self.assertAlmostEqual(intrinsics.fy, 510.0)
        self.assertAlmostEqual(intrinsics.cy, 240.0)
        self.assertEqual(intrinsics.width, 320)
        self.assertEqual(intrinsics.height, 480)

    def test_transform_round_trip_order(self) -> None:
        """Quaternions map between xyzw messages and wxyz transforms"""
        message: TransformMsg = TransformMsg()
        message.translation.x = 1.0
        message.translation.y = 2.0
        message.translation.z = 3.0
        message.rotation.x = 0.0
        message.rotation.y = 0.0
        message.rotation.z = math.sin(0.25)
        message.rotation.w = math.cos(0.25)

        transform: RigidTransform = transform_from_ros(message)
        stamped: TransformStampedMsg = to_transform_stamped(
            stamp=TimeMsg(sec=3, nanosec=4),
            parent="odom",
            child="base_link",
            transform=transform,
        )

        self.assertTrue(
            np.allclose(
                transform.rotation_wxyz, [math.cos(0.25), 0.0, 0.0, math.sin(0.25)]
            )
        )
        self.assertEqual(stamped.header.frame_id, "odom")
        self.assertEqual(stamped.child_frame_id, "base_link")
        self.assertAlmostEqual(stamped.transform.translation.y, 2.0)
        self.assertAlmostEqual(stamped.transform.rotation.z, math.sin(0.25))
        self.assertAlmostEqual(stamped.transform.rotation.w, math.cos(0.25))

    def test_build_odometry(self) -> None:
        """Odometry carries pose, twist and row-major covariance"""
        covariance: np.ndarray = np.arange(36, dtype=float).reshape(6, 6)
        twist: Twist = Twist(
            linear_mps=np.array([0.5, 0.0, 0.0]),
            angular_rps=np.array([0.0, 0.0, 0.1]),
            covariance=covariance,
        )

        message: OdometryMsg = build_odometry(
            stamp=TimeMsg(sec=1, nanosec=0),
            odom_frame_id="odom",
            base_link_frame_id="base_link",
            pose=RigidTransform.from_translation_rpy([1.0, 2.0, 0.0]),
            twist=twist,
        )

        self.assertEqual(message.header.frame_id, "odom")
        self.assertEqual(message.child_frame_id, "base_link")
        self.assertAlmostEqual(message.pose.pose.position.y, 2.0)
        self.assertAlmostEqual(message.pose.pose.orientation.w, 1.0)
        self.assertAlmostEqual(message.twist.twist.linear.x, 0.5)
        self.assertAlmostEqual(message.twist.twist.angular.z, 0.1)
        self.assertAlmostEqual(message.twist.covariance[1], 1.0)
        self.assertAlmostEqual(message.twist.covariance[6], 6.0)

    def test_build_odometry_without_twist(self) -> None:
        """A missing twist leaves the velocity zeroed"""
        message: OdometryMsg = build_odometry(
            stamp=TimeMsg(sec=1, nanosec=0),
            odom_frame_id="odom",
            base_link_frame_id="base_link",
            pose=RigidTransform.identity(),
            twist=None,
        )

        self.assertAlmostEqual(message.twist.twist.linear.x, 0.0)
        self.assertAlmostEqual(message.twist.covariance[0], 0.0)

    def test_diagnostic_levels(self) -> None:
        """Only successful estimates report an OK level"""
        ok: DiagnosticArrayMsg = build_diagnostic_array(
            stamp=TimeMsg(sec=1, nanosec=0),
            name="odometer",
            hardware_id="camera",
            diagnostics=_diagnostics(MotionStatus.SUCCESS),
        )
        warn: DiagnosticArrayMsg = build_diagnostic_array(
            stamp=TimeMsg(sec=1, nanosec=0),
            name="odometer",
            hardware_id="camera",
            diagnostics=_diagnostics(MotionStatus.INSUFFICIENT_INLIERS),
        )

        self.assertEqual(ok.status[0].level, DiagnosticStatusMsg.OK)
        self.assertEqual(warn.status[0].level, DiagnosticStatusMsg.WARN)
        self.assertEqual(warn.status[0].message, "INSUFFICIENT_INLIERS")

        values: dict[str, str] = {
            entry.key: entry.value for entry in ok.status[0].values
        }
        self.assertEqual(values["num_keypoints"], "10,5")
        self.assertEqual(values["num_total_keypoints"], "15")

    def test_depth_millimeters(self) -> None:
        """Integer depth converts to meters with zero as missing"""
        depth: np.ndarray = np.array([[0, 1500], [250, 1000]], dtype=np.uint16)

        depth_m: np.ndarray = depth_image_to_meters(depth, "16UC1")

        self.assertEqual(depth_m.dtype, np.float32)
        self.assertTrue(math.isnan(float(depth_m[0, 0])))
        self.assertAlmostEqual(float(depth_m[0, 1]), 1.5, places=6)
        self.assertAlmostEqual(float(depth_m[1, 0]), 0.25, places=6)

    def test_depth_unsupported_encoding(self) -> None:
        """Color encodings are not depth"""
        with self.assertRaises(ValueError):
            depth_image_to_meters(np.zeros((2, 2), dtype=np.uint8), "rgb8")
