################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

from launch import LaunchDescription
from launch.actions import DeclareLaunchArgument
from launch.substitutions import LaunchConfiguration
from launch_ros.actions import Node


################################################################################
# ROS parameters
################################################################################


ROS_NAMESPACE: str = "oasis"

ODOMETRY_PACKAGE_NAME: str = "oasis_odometry"

# Launch arguments
ARG_CAMERA: str = "camera"
ARG_FRAME_PROCESSOR: str = "frame_processor"

DEFAULT_CAMERA: str = "camera"


################################################################################
# Launch description
################################################################################


def generate_launch_description() -> LaunchDescription:
    ld: LaunchDescription = LaunchDescription()

    ld.add_action(
        DeclareLaunchArgument(
            ARG_CAMERA,
            default_value=DEFAULT_CAMERA,
            description="Namespace of the RGB-D camera topics",
        )
    )
    ld.add_action(
        DeclareLaunchArgument(
            ARG_FRAME_PROCESSOR,
            description="Frame processor factory as 'package.module:attribute'",
        )
    )

    camera: LaunchConfiguration = LaunchConfiguration(ARG_CAMERA)

    odometer_node: Node = Node(
        namespace=ROS_NAMESPACE,
        package=ODOMETRY_PACKAGE_NAME,
        executable="odometer",
        name="odometer",
        output="screen",
        parameters=[
            {
                "frame_processor": LaunchConfiguration(ARG_FRAME_PROCESSOR),
            },
        ],
        remappings=[
            ("image", [camera, "/image_rect"]),
            ("depth", [camera, "/depth_registered/image_rect"]),
            ("camera_info", [camera, "/camera_info"]),
        ],
    )
    ld.add_action(odometer_node)

    return ld
