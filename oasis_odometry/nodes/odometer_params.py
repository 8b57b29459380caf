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
Centralized odometer ROS parameter names and defaults
"""

# Frame of the odometry world, parent of the published transform
PARAM_ODOM_FRAME_ID: str = "odom_frame_id"

# Default frame of the odometry world
DEFAULT_ODOM_FRAME_ID: str = "odom"

# Frame of the robot base, child of the published transform
PARAM_BASE_LINK_FRAME_ID: str = "base_link_frame_id"

# Default frame of the robot base
DEFAULT_BASE_LINK_FRAME_ID: str = "base_link"

# True to broadcast the odom -> base_link transform
PARAM_PUBLISH_TF: str = "publish_tf"

# Default for broadcasting the odom -> base_link transform
DEFAULT_PUBLISH_TF: bool = True

# Multiplier applied to the translation of every published pose, 0 is treated as 1
PARAM_TF_FACTOR: str = "tf_factor"

# Default translation correction factor
DEFAULT_TF_FACTOR: float = 1.0

# Import path of the frame processor factory, "package.module:attribute"
PARAM_FRAME_PROCESSOR: str = "frame_processor"

# Default frame processor factory, empty to require configuration
DEFAULT_FRAME_PROCESSOR: str = ""

# Frame processor options as "key=value" strings, underscores in keys are
# passed to the processor as hyphens
PARAM_PROCESSOR_OPTIONS: str = "processor_options"

# Default frame processor options, a single empty entry so the parameter is
# typed as a string array
DEFAULT_PROCESSOR_OPTIONS: list[str] = [""]

# Seconds without a pose broadcast before the last pose is broadcast again
PARAM_IDLE_REPUBLISH_PERIOD: str = "idle_republish_period"

# Default idle republish period, seconds
DEFAULT_IDLE_REPUBLISH_PERIOD: float = 9.0

# Period of the idle republish check, seconds
IDLE_CHECK_PERIOD_SEC: float = 1.0

# Queue size of the image, depth and camera info synchronizer
SYNC_QUEUE_SIZE: int = 10
