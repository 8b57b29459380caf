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
ROS entry point for visual odometry
"""

import sys
from typing import Optional

import rclpy
from rclpy.executors import MultiThreadedExecutor

from oasis_odometry.nodes.odometer_node import OdometerNode
from oasis_odometry.odometry.odometry_errors import ProcessorLoadError


################################################################################
# ROS entry point
################################################################################


def main(args: Optional[list[str]] = None) -> None:
    rclpy.init(args=args)

    try:
        node: OdometerNode = OdometerNode()
    except ProcessorLoadError:
        rclpy.shutdown()
        sys.exit(1)

    # Frame processing, idle republishing and reinit requests run concurrently
    executor: MultiThreadedExecutor = MultiThreadedExecutor()
    executor.add_node(node)

    try:
        executor.spin()
    except KeyboardInterrupt:
        pass
    finally:
        node.stop()
        rclpy.shutdown()
