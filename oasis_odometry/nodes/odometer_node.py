################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

from typing import Optional

import cv_bridge
import message_filters
import numpy as np
import rclpy.callback_groups
import rclpy.node
import rclpy.publisher
import rclpy.qos
import rclpy.service
import rclpy.timer
import tf2_ros
from builtin_interfaces.msg import Time as TimeMsg
from diagnostic_msgs.msg import DiagnosticArray as DiagnosticArrayMsg
from geometry_msgs.msg import PoseStamped as PoseStampedMsg
from nav_msgs.msg import Odometry as OdometryMsg
from sensor_msgs.msg import CameraInfo as CameraInfoMsg
from sensor_msgs.msg import Image as ImageMsg
from std_srvs.srv import Trigger as TriggerSvc

from oasis_odometry.nodes import odometer_params as odom_params
from oasis_odometry.odometry.frame_processor import FrameProcessorFactory
from oasis_odometry.odometry.odometry_config import OdometryConfig
from oasis_odometry.odometry.odometry_errors import OdometryPreconditionError
from oasis_odometry.odometry.odometry_errors import ProcessorLoadError
from oasis_odometry.odometry.odometry_types import CameraIntrinsics
from oasis_odometry.odometry.odometry_types import OdometryResult
from oasis_odometry.odometry.odometry_types import StampedPose
from oasis_odometry.odometry.pose_integrator import PoseIntegrator
from oasis_odometry.odometry.processor_loader import load_processor_factory
from oasis_odometry.odometry.processor_loader import parse_processor_options
from oasis_odometry.odometry.rigid_transform import RigidTransform
from oasis_odometry.odometry.ros_conversions import build_diagnostic_array
from oasis_odometry.odometry.ros_conversions import build_odometry
from oasis_odometry.odometry.ros_conversions import build_pose_stamped
from oasis_odometry.odometry.ros_conversions import camera_info_to_intrinsics
from oasis_odometry.odometry.ros_conversions import depth_image_to_meters
from oasis_odometry.odometry.ros_conversions import seconds_to_stamp
from oasis_odometry.odometry.ros_conversions import stamp_to_seconds
from oasis_odometry.odometry.ros_conversions import to_transform_stamped
from oasis_odometry.odometry.tf_extrinsics_resolver import TfExtrinsicsResolver


################################################################################
# ROS parameters
################################################################################


NODE_NAME: str = "odometer"

# ROS topics
IMAGE_TOPIC: str = "image"
DEPTH_TOPIC: str = "depth"
CAMERA_INFO_TOPIC: str = "camera_info"

ODOMETRY_TOPIC: str = "odometry"
POSE_TOPIC: str = "pose"
INFO_TOPIC: str = "info"
FEATURES_TOPIC: str = "features"

# ROS services
REINIT_SERVICE: str = "reinit"

# Hardware ID reported in the diagnostics
DIAGNOSTICS_HARDWARE_ID: str = "visual_odometry"


################################################################################
# ROS node
################################################################################


class OdometerNode(rclpy.node.Node):
    def __init__(self) -> None:
        """
        Initialize resources
        """

        super().__init__(NODE_NAME)

        self.declare_parameter(
            odom_params.PARAM_ODOM_FRAME_ID, odom_params.DEFAULT_ODOM_FRAME_ID
        )
        self.declare_parameter(
            odom_params.PARAM_BASE_LINK_FRAME_ID,
            odom_params.DEFAULT_BASE_LINK_FRAME_ID,
        )
        self.declare_parameter(
            odom_params.PARAM_PUBLISH_TF, odom_params.DEFAULT_PUBLISH_TF
        )
        self.declare_parameter(
            odom_params.PARAM_TF_FACTOR, odom_params.DEFAULT_TF_FACTOR
        )
        self.declare_parameter(
            odom_params.PARAM_FRAME_PROCESSOR, odom_params.DEFAULT_FRAME_PROCESSOR
        )
        self.declare_parameter(
            odom_params.PARAM_PROCESSOR_OPTIONS,
            odom_params.DEFAULT_PROCESSOR_OPTIONS,
        )
        self.declare_parameter(
            odom_params.PARAM_IDLE_REPUBLISH_PERIOD,
            odom_params.DEFAULT_IDLE_REPUBLISH_PERIOD,
        )

        self._odom_frame_id: str = str(
            self.get_parameter(odom_params.PARAM_ODOM_FRAME_ID).value
        )
        self._base_link_frame_id: str = str(
            self.get_parameter(odom_params.PARAM_BASE_LINK_FRAME_ID).value
        )
        self._publish_tf: bool = bool(
            self.get_parameter(odom_params.PARAM_PUBLISH_TF).value
        )
        tf_factor: float = float(self.get_parameter(odom_params.PARAM_TF_FACTOR).value)
        frame_processor_path: str = str(
            self.get_parameter(odom_params.PARAM_FRAME_PROCESSOR).value
        )
        option_entries: list[str] = [
            str(entry)
            for entry in self.get_parameter(odom_params.PARAM_PROCESSOR_OPTIONS).value
        ]
        idle_republish_period: float = float(
            self.get_parameter(odom_params.PARAM_IDLE_REPUBLISH_PERIOD).value
        )

        try:
            processor_factory: FrameProcessorFactory = load_processor_factory(
                frame_processor_path
            )
            # ROS parameter names can't carry hyphens
            processor_options: dict[str, str] = {
                key.replace("_", "-"): value
                for key, value in parse_processor_options(option_entries).items()
            }
        except ProcessorLoadError as err:
            self.get_logger().fatal(f"Failed to load frame processor: {err}")
            raise

        config: OdometryConfig = OdometryConfig(
            odom_frame_id=self._odom_frame_id,
            base_link_frame_id=self._base_link_frame_id,
            publish_tf=self._publish_tf,
            translation_correction_factor=tf_factor,
            idle_republish_period_sec=idle_republish_period,
            processor_options=processor_options,
        )

        # Transform tree
        self._tf_buffer: tf2_ros.Buffer = tf2_ros.Buffer()
        self._tf_listener: tf2_ros.TransformListener = tf2_ros.TransformListener(
            self._tf_buffer, self
        )
        self._tf_broadcaster: Optional[tf2_ros.TransformBroadcaster] = None
        if self._publish_tf:
            self._tf_broadcaster = tf2_ros.TransformBroadcaster(self)

        # Odometry
        self._integrator: PoseIntegrator = PoseIntegrator(
            config,
            processor_factory,
            TfExtrinsicsResolver(self._tf_buffer, self._base_link_frame_id),
        )

        # Initialize cv_bridge to convert between ROS and numpy images
        self._cv_bridge: cv_bridge.CvBridge = cv_bridge.CvBridge()

        qos_profile: rclpy.qos.QoSProfile = (
            rclpy.qos.QoSPresetProfiles.SENSOR_DATA.value
        )

        # Timer and service callbacks may run while a frame is processed
        self._idle_callback_group: rclpy.callback_groups.ReentrantCallbackGroup = (
            rclpy.callback_groups.ReentrantCallbackGroup()
        )

        # ROS Publishers
        self._odometry_pub: rclpy.publisher.Publisher = self.create_publisher(
            msg_type=OdometryMsg,
            topic=ODOMETRY_TOPIC,
            qos_profile=qos_profile,
        )
        self._pose_pub: rclpy.publisher.Publisher = self.create_publisher(
            msg_type=PoseStampedMsg,
            topic=POSE_TOPIC,
            qos_profile=qos_profile,
        )
        self._info_pub: rclpy.publisher.Publisher = self.create_publisher(
            msg_type=DiagnosticArrayMsg,
            topic=INFO_TOPIC,
            qos_profile=qos_profile,
        )
        self._features_pub: rclpy.publisher.Publisher = self.create_publisher(
            msg_type=ImageMsg,
            topic=FEATURES_TOPIC,
            qos_profile=qos_profile,
        )

        # ROS Subscribers
        self._image_filter_sub: message_filters.Subscriber = (
            message_filters.Subscriber(
                self,
                ImageMsg,
                IMAGE_TOPIC,
                qos_profile=qos_profile,
            )
        )
        self._depth_filter_sub: message_filters.Subscriber = (
            message_filters.Subscriber(
                self,
                ImageMsg,
                DEPTH_TOPIC,
                qos_profile=qos_profile,
            )
        )
        self._camera_info_filter_sub: message_filters.Subscriber = (
            message_filters.Subscriber(
                self,
                CameraInfoMsg,
                CAMERA_INFO_TOPIC,
                qos_profile=qos_profile,
            )
        )

        # ROS message synchronizers
        self._frame_sync: message_filters.TimeSynchronizer = (
            message_filters.TimeSynchronizer(
                [
                    self._image_filter_sub,
                    self._depth_filter_sub,
                    self._camera_info_filter_sub,
                ],
                queue_size=odom_params.SYNC_QUEUE_SIZE,
            )
        )
        self._frame_sync.registerCallback(self._handle_frame)

        # Services
        self._reinit_service: rclpy.service.Service = self.create_service(
            srv_type=TriggerSvc,
            srv_name=REINIT_SERVICE,
            callback=self._handle_reinit,
            callback_group=self._idle_callback_group,
        )

        # Timers
        self._idle_timer: rclpy.timer.Timer = self.create_timer(
            timer_period_sec=odom_params.IDLE_CHECK_PERIOD_SEC,
            callback=self._on_idle_timer,
            callback_group=self._idle_callback_group,
        )

        self.get_logger().info("Odometer initialized")

    def stop(self) -> None:
        self.get_logger().info("Odometer deinitialized")

        self.destroy_node()

    def _handle_frame(
        self, image_msg: ImageMsg, depth_msg: ImageMsg, camera_info_msg: CameraInfoMsg
    ) -> None:
        try:
            image: np.ndarray = np.ascontiguousarray(
                self._cv_bridge.imgmsg_to_cv2(image_msg, desired_encoding="mono8")
            )
            depth_raw: np.ndarray = self._cv_bridge.imgmsg_to_cv2(
                depth_msg, desired_encoding="passthrough"
            )
        except cv_bridge.CvBridgeError as err:
            self.get_logger().warn(
                f"Dropping frame, image conversion failed: {err} "
                f"(image encoding={image_msg.encoding!r}, "
                f"depth encoding={depth_msg.encoding!r})"
            )
            return

        try:
            depth: np.ndarray = depth_image_to_meters(depth_raw, depth_msg.encoding)
        except ValueError as err:
            self.get_logger().warn(f"Dropping frame: {err}")
            return

        intrinsics: CameraIntrinsics = camera_info_to_intrinsics(camera_info_msg)
        timestamp: float = stamp_to_seconds(image_msg.header.stamp)

        try:
            result: OdometryResult = self._integrator.process_frame(
                image,
                depth,
                timestamp,
                image_msg.header.frame_id,
                intrinsics,
            )
        except OdometryPreconditionError as err:
            self.get_logger().fatal(f"Odometry precondition violated: {err}")
            raise

        stamp: TimeMsg = image_msg.header.stamp

        if result.pose is not None:
            world_pose: RigidTransform = result.pose.pose

            self._odometry_pub.publish(
                build_odometry(
                    stamp=stamp,
                    odom_frame_id=self._odom_frame_id,
                    base_link_frame_id=self._base_link_frame_id,
                    pose=world_pose,
                    twist=result.twist,
                )
            )
            self._pose_pub.publish(
                build_pose_stamped(
                    stamp=stamp,
                    frame_id=self._base_link_frame_id,
                    transform=world_pose,
                )
            )
            self._send_transform(stamp, world_pose)

        self._info_pub.publish(
            build_diagnostic_array(
                stamp=stamp,
                name=f"{self.get_name()}: {NODE_NAME}",
                hardware_id=DIAGNOSTICS_HARDWARE_ID,
                diagnostics=result.diagnostics,
            )
        )

        if not result.diagnostics.first_run:
            self._publish_features(image_msg)

    def _publish_features(self, image_msg: ImageMsg) -> None:
        if self._features_pub.get_subscription_count() == 0:
            return

        canvas: Optional[np.ndarray] = self._integrator.render_features()
        if canvas is None:
            return

        encoding: str = "rgb8" if canvas.ndim == 3 else "mono8"
        features_msg: ImageMsg = self._cv_bridge.cv2_to_imgmsg(
            canvas, encoding=encoding
        )
        features_msg.header = image_msg.header
        self._features_pub.publish(features_msg)

    def _handle_reinit(
        self, request: TriggerSvc.Request, response: TriggerSvc.Response
    ) -> TriggerSvc.Response:
        self._integrator.reinit()

        response.success = True
        response.message = "Odometer will reinitialize on the next frame"
        return response

    def _on_idle_timer(self) -> None:
        now_sec: float = self.get_clock().now().nanoseconds / 1e9

        stamped_pose: Optional[StampedPose] = (
            self._integrator.publish_last_known_pose(now_sec)
        )
        if stamped_pose is None:
            return

        self._send_transform(
            seconds_to_stamp(stamped_pose.timestamp), stamped_pose.pose
        )

    def _send_transform(self, stamp: TimeMsg, world_pose: RigidTransform) -> None:
        if self._tf_broadcaster is None:
            return

        self._tf_broadcaster.sendTransform(
            to_transform_stamped(
                stamp=stamp,
                parent=self._odom_frame_id,
                child=self._base_link_frame_id,
                transform=world_pose,
            )
        )
