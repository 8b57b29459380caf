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
Types shared by the odometry core and its ROS adapters
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from dataclasses import field
from typing import Optional

import numpy as np

from oasis_odometry.odometry.rigid_transform import RigidTransform


# Dimension of the twist and motion covariance, linear XYZ then angular XYZ
COVARIANCE_DIM: int = 6


class MotionStatus(enum.IntEnum):
    """
    Motion estimate status codes reported by a frame processor

    Attributes:
        NO_DATA: No estimate was attempted, e.g. no reference frame yet
        SUCCESS: A valid motion estimate is available
        INSUFFICIENT_INLIERS: Too few inlier matches to estimate motion
        OPTIMIZATION_FAILURE: The motion refinement did not converge
        REPROJECTION_ERROR: The estimate failed the reprojection check
    """

    NO_DATA = 0
    SUCCESS = 1
    INSUFFICIENT_INLIERS = 2
    OPTIMIZATION_FAILURE = 3
    REPROJECTION_ERROR = 4

    @property
    def description(self) -> str:
        return self.name


@dataclass(frozen=True)
class CameraIntrinsics:
    """
    Pinhole intrinsics handed to the frame processor factory

    Fields:
        fx: Focal length along X in pixels
        fy: Focal length along Y in pixels
        cx: Principal point X in pixels
        cy: Principal point Y in pixels
        width: Image width in pixels
        height: Image height in pixels
    """

    fx: float
    fy: float
    cx: float
    cy: float
    width: int
    height: int


@dataclass(frozen=True)
class FrameStatistics:
    """
    Per-frame feature statistics reported by a frame processor

    Fields:
        num_detected_keypoints: Detected keypoints per pyramid level
        num_keypoints: Keypoints kept after filtering per pyramid level
        num_matches: Number of feature matches against the reference frame
        num_inliers: Number of matches consistent with the motion estimate
        num_reprojection_failures: Matches rejected by reprojection
        change_reference_frame: True if the processor switched key frames
        fast_threshold: Current FAST corner detector threshold
        motion_estimate_valid: True if the processor trusts its estimate
    """

    num_detected_keypoints: tuple[int, ...] = ()
    num_keypoints: tuple[int, ...] = ()
    num_matches: int = 0
    num_inliers: int = 0
    num_reprojection_failures: int = 0
    change_reference_frame: bool = False
    fast_threshold: int = 0
    motion_estimate_valid: bool = False

    @property
    def num_total_detected_keypoints(self) -> int:
        return int(sum(self.num_detected_keypoints))

    @property
    def num_total_keypoints(self) -> int:
        return int(sum(self.num_keypoints))


@dataclass(frozen=True, eq=False)
class MotionEstimate:
    """
    Output of one frame processor call

    Fields:
        status: Motion estimate status code
        relative_pose: Sensor pose relative to the processor's reference
            frame at initialization
        motion: Sensor motion between the previous and the current frame
        covariance: 6x6 motion covariance, linear XYZ then angular XYZ
        statistics: Feature statistics for diagnostics
    """

    status: MotionStatus
    relative_pose: RigidTransform
    motion: RigidTransform
    covariance: np.ndarray = field(
        default_factory=lambda: np.zeros((COVARIANCE_DIM, COVARIANCE_DIM))
    )
    statistics: FrameStatistics = field(default_factory=FrameStatistics)


@dataclass(frozen=True, eq=False)
class Twist:
    """
    Velocity of the base frame derived from consecutive frames

    Fields:
        linear_mps: Linear velocity in m/s, XYZ order
        angular_rps: Angular velocity in rad/s, XYZ order
        covariance: 6x6 twist covariance, linear XYZ then angular XYZ
    """

    linear_mps: np.ndarray
    angular_rps: np.ndarray
    covariance: np.ndarray


@dataclass(frozen=True, eq=False)
class StampedPose:
    """
    Base-to-world pose with its timestamp

    Fields:
        timestamp: Timestamp in seconds
        pose: Base-to-world transform
    """

    timestamp: float
    pose: RigidTransform


@dataclass(frozen=True)
class OdometryDiagnostics:
    """
    Observational record produced for every processed frame

    Fields:
        timestamp: Frame timestamp in seconds
        status: Motion estimate status code
        status_description: Human readable status
        first_run: True if the frame processor was created for this frame
        statistics: Feature statistics reported by the frame processor
        runtime_sec: Wall-clock processing time in seconds
    """

    timestamp: float
    status: MotionStatus
    status_description: str
    first_run: bool
    statistics: FrameStatistics
    runtime_sec: float


@dataclass(frozen=True)
class OdometryResult:
    """
    Outputs of one processed frame

    Fields:
        pose: Base-to-world pose at the frame timestamp, None if no pose
            update happened this frame
        twist: Base velocity, None if no valid previous sample existed
        diagnostics: Diagnostic record for the frame
        reset: True if a numerical fault re-anchored the pose chain
    """

    pose: Optional[StampedPose]
    twist: Optional[Twist]
    diagnostics: OdometryDiagnostics
    reset: bool = False
