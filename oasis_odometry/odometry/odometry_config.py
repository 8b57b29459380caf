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
Configuration data for visual odometry integration
"""

from dataclasses import dataclass
from dataclasses import field
from types import MappingProxyType
from typing import Mapping


# Default period in seconds after which the last pose is broadcast again
DEFAULT_IDLE_REPUBLISH_PERIOD_SEC: float = 9.0

# Default minimum period in seconds between missing extrinsics warnings
DEFAULT_EXTRINSICS_WARN_PERIOD_SEC: float = 10.0


@dataclass(frozen=True)
class OdometryConfig:
    """
    Static odometry configuration, fixed at startup

    Fields:
        odom_frame_id: World frame the pose is expressed in
        base_link_frame_id: Robot base frame the pose describes
        publish_tf: True to broadcast the odom to base transform
        translation_correction_factor: Scale applied to the pose translation,
            a value of exactly 0 is treated as unset and replaced by 1
        idle_republish_period_sec: Age in seconds after which the last known
            pose is broadcast again
        extrinsics_warn_period_sec: Minimum seconds between warnings about
            missing base to sensor extrinsics
        processor_options: Tuning options forwarded verbatim to the frame
            processor, keys and values are strings
    """

    odom_frame_id: str = "odom"
    base_link_frame_id: str = "base_link"
    publish_tf: bool = True
    translation_correction_factor: float = 1.0
    idle_republish_period_sec: float = DEFAULT_IDLE_REPUBLISH_PERIOD_SEC
    extrinsics_warn_period_sec: float = DEFAULT_EXTRINSICS_WARN_PERIOD_SEC
    processor_options: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Normalize the correction factor and freeze the processor options."""
        if self.translation_correction_factor == 0.0:
            object.__setattr__(self, "translation_correction_factor", 1.0)
        object.__setattr__(
            self,
            "processor_options",
            MappingProxyType(
                {str(key): str(value) for key, value in self.processor_options.items()}
            ),
        )
