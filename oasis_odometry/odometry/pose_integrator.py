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
Pose chain integration and drift recovery for visual odometry

The frame processor reports the sensor pose against the reference frame it
captured when it was created. The integrator anchors that reference in the
world frame and turns every estimate into a base-to-world pose:

    T_world_base = T_anchor * T_ref_sensor * T_base_sensor^-1

where T_anchor is the base-to-sensor extrinsics snapshot at cold start, or
the last good world pose composed with the extrinsics after a numerical
fault discarded the processor.
"""

from __future__ import annotations

import enum
import logging
import threading
import time
from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import Callable
from typing import Optional

import numpy as np

from oasis_odometry.odometry.extrinsics import ExtrinsicsResolver
from oasis_odometry.odometry.frame_processor import FeatureRenderer
from oasis_odometry.odometry.frame_processor import FrameProcessor
from oasis_odometry.odometry.frame_processor import FrameProcessorFactory
from oasis_odometry.odometry.frame_processor import FrameProcessorSlot
from oasis_odometry.odometry.frame_processor import ProcessorSlotState
from oasis_odometry.odometry.log_throttle import LogThrottle
from oasis_odometry.odometry.odometry_config import OdometryConfig
from oasis_odometry.odometry.odometry_diagnostics import build_diagnostics
from oasis_odometry.odometry.odometry_errors import ExtrinsicsUnavailableError
from oasis_odometry.odometry.odometry_errors import OdometryPreconditionError
from oasis_odometry.odometry.odometry_twist import derive_twist
from oasis_odometry.odometry.odometry_types import CameraIntrinsics
from oasis_odometry.odometry.odometry_types import MotionEstimate
from oasis_odometry.odometry.odometry_types import MotionStatus
from oasis_odometry.odometry.odometry_types import OdometryResult
from oasis_odometry.odometry.odometry_types import StampedPose
from oasis_odometry.odometry.odometry_types import Twist
from oasis_odometry.odometry.rigid_transform import RigidTransform


_LOG: logging.Logger = logging.getLogger(__name__)


class IntegratorPhase(enum.Enum):
    """
    Pose chain states

    Attributes:
        UNINITIALIZED: No frame processor, the next frame re-anchors
        TRACKING: A frame processor is tracking against the anchor
    """

    UNINITIALIZED = "uninitialized"
    TRACKING = "tracking"


@dataclass
class IntegratorState:
    """
    Mutable state of the pose chain, owned by one PoseIntegrator

    Fields:
        anchor: Base-to-world pose of the processor's reference frame
        current_world_pose: Last good base-to-world pose, always finite
        last_estimate_timestamp: Time of the last successful update in
            seconds, None if the next success must not derive a velocity
        last_published_timestamp: Time of the last pose broadcast in seconds
        pending_reset: True between a numerical fault and the next processor
            creation, the anchor is then kept instead of re-snapshotted
    """

    anchor: RigidTransform = field(default_factory=RigidTransform.identity)
    current_world_pose: RigidTransform = field(default_factory=RigidTransform.identity)
    last_estimate_timestamp: Optional[float] = None
    last_published_timestamp: float = 0.0
    pending_reset: bool = False


class PoseIntegrator:
    """
    ROS-agnostic owner of the odometry pose chain

    All public operations are serialized by a single lock, so frame
    processing and idle republishing may be driven from different threads.

    The translation correction factor scales the whole composed pose,
    anchor included. An anchor re-derived after a numerical fault already
    carries a scaled translation, so with a factor other than 1 the first
    pose after the fault jumps by that factor. Poses are only continuous
    across a fault when the factor is 1.
    """

    def __init__(
        self,
        config: OdometryConfig,
        processor_factory: FrameProcessorFactory,
        extrinsics_resolver: ExtrinsicsResolver,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config: OdometryConfig = config
        self._slot: FrameProcessorSlot = FrameProcessorSlot(processor_factory)
        self._extrinsics: ExtrinsicsResolver = extrinsics_resolver
        self._clock: Callable[[], float] = clock
        self._extrinsics_throttle: LogThrottle = LogThrottle(
            config.extrinsics_warn_period_sec, clock=clock
        )
        self._state: IntegratorState = IntegratorState()
        self._lock: threading.Lock = threading.Lock()

    @property
    def config(self) -> OdometryConfig:
        return self._config

    @property
    def phase(self) -> IntegratorPhase:
        with self._lock:
            return self._phase()

    @property
    def last_known_pose(self) -> RigidTransform:
        with self._lock:
            return self._state.current_world_pose

    @property
    def anchor(self) -> RigidTransform:
        with self._lock:
            return self._state.anchor

    def process_frame(
        self,
        image: np.ndarray,
        depth_source: Any,
        timestamp: float,
        sensor_frame_id: str,
        intrinsics: Optional[CameraIntrinsics] = None,
    ) -> OdometryResult:
        """
        Integrate one image into the pose chain

        Args:
            image: Densely packed 2D uint8 grayscale image
            depth_source: Depth or stereo data forwarded to the processor
            timestamp: Image timestamp in seconds, non-decreasing
            sensor_frame_id: Frame of the camera that captured the image
            intrinsics: Camera intrinsics, used when a processor is created

        Returns:
            The frame result. A missing pose is a normal outcome after a
            failed estimate or a numerical fault.

        Raises:
            OdometryPreconditionError: If the depth source is missing or the
                image is not a densely packed 8-bit image
        """

        _check_frame_preconditions(image, depth_source)

        with self._lock:
            start_time: float = self._clock()

            first_run: bool = False
            if self._phase() == IntegratorPhase.UNINITIALIZED:
                first_run = True
                self._initialize_processor(timestamp, sensor_frame_id, intrinsics)

            processor: Optional[FrameProcessor] = self._slot.processor
            assert processor is not None

            estimate: MotionEstimate = processor.process_frame(image, depth_source)

            if estimate.status != MotionStatus.SUCCESS:
                _LOG.warning("Odometry failed: %s", estimate.status.description)
                self._state.last_estimate_timestamp = None
                return self._make_result(
                    timestamp, estimate, first_run, start_time, pose=None, twist=None
                )

            base_to_sensor: RigidTransform = self._lookup_base_to_sensor(
                timestamp, sensor_frame_id
            )

            world_pose: RigidTransform = (
                self._state.anchor
                @ estimate.relative_pose
                @ base_to_sensor.inverse()
            )

            if not estimate.relative_pose.is_finite() or not world_pose.is_finite():
                _LOG.error("Non-finite value in odometry pose, resetting odometer")
                self._reanchor_from_last_good_pose(base_to_sensor)
                return self._make_result(
                    timestamp,
                    estimate,
                    first_run,
                    start_time,
                    pose=None,
                    twist=None,
                    reset=True,
                )

            world_pose = world_pose.scale_translation(
                self._config.translation_correction_factor
            )
            self._state.current_world_pose = world_pose

            twist: Optional[Twist] = None
            last_timestamp: Optional[float] = self._state.last_estimate_timestamp
            if last_timestamp is not None:
                dt_sec: float = timestamp - last_timestamp
                if dt_sec > 0.0:
                    twist = derive_twist(
                        estimate.motion,
                        base_to_sensor,
                        estimate.covariance,
                        dt_sec,
                    )

            self._state.last_estimate_timestamp = timestamp
            self._state.last_published_timestamp = timestamp

            return self._make_result(
                timestamp,
                estimate,
                first_run,
                start_time,
                pose=StampedPose(timestamp=timestamp, pose=world_pose),
                twist=twist,
            )

    def reinit(self) -> None:
        """
        Discard the frame processor so the next frame re-anchors from scratch

        Unlike the recovery from a numerical fault, the next anchor is the
        base-to-sensor extrinsics snapshot, which puts the base back at the
        origin of the world frame.
        """

        with self._lock:
            if self._slot.reset():
                _LOG.info("Reinitializing odometer")
            self._state.pending_reset = False
            self._state.last_estimate_timestamp = None

    def publish_last_known_pose(self, now: float) -> Optional[StampedPose]:
        """
        Return the last known pose stamped at now if it is due for a rebroadcast

        Args:
            now: Current time in seconds

        Returns:
            The pose to broadcast, or None if broadcasting is disabled or the
            last broadcast is recent enough
        """

        with self._lock:
            if not self._config.publish_tf:
                return None

            age_sec: float = now - self._state.last_published_timestamp
            if age_sec <= self._config.idle_republish_period_sec:
                return None

            self._state.last_published_timestamp = now
            return StampedPose(timestamp=now, pose=self._state.current_world_pose)

    def render_features(self) -> Optional[np.ndarray]:
        """
        Draw the features tracked by the live frame processor

        Returns:
            The processor's canvas, or None if no processor exists or it
            can't render its features
        """

        with self._lock:
            processor: Optional[FrameProcessor] = self._slot.processor
            if not isinstance(processor, FeatureRenderer):
                return None
            return processor.render_features()

    def _phase(self) -> IntegratorPhase:
        if self._slot.state == ProcessorSlotState.ACTIVE:
            return IntegratorPhase.TRACKING
        return IntegratorPhase.UNINITIALIZED

    def _initialize_processor(
        self,
        timestamp: float,
        sensor_frame_id: str,
        intrinsics: Optional[CameraIntrinsics],
    ) -> None:
        self._slot.activate(intrinsics, self._config.processor_options)

        # Only snapshot the extrinsics on a cold start, a reset keeps the
        # anchor derived from the last good pose
        if self._state.pending_reset:
            self._state.pending_reset = False
        else:
            self._state.anchor = self._lookup_base_to_sensor(timestamp, sensor_frame_id)

        option_lines: list[str] = [
            f"{key.replace('-', '_')} = {value}"
            for key, value in self._config.processor_options.items()
        ]
        _LOG.info(
            "Initialized odometry with the following options:\n%s",
            "\n".join(option_lines),
        )

    def _reanchor_from_last_good_pose(self, base_to_sensor: RigidTransform) -> None:
        self._state.anchor = self._state.current_world_pose @ base_to_sensor
        self._state.pending_reset = True
        self._state.last_estimate_timestamp = None
        self._slot.reset()

    def _lookup_base_to_sensor(
        self, timestamp: float, sensor_frame_id: str
    ) -> RigidTransform:
        try:
            return self._extrinsics.resolve(timestamp, sensor_frame_id)
        except ExtrinsicsUnavailableError as exc:
            if self._extrinsics_throttle.should_log(sensor_frame_id):
                _LOG.warning(
                    "The transform from '%s' to '%s' does not seem to be "
                    "available, will assume it as identity",
                    self._config.base_link_frame_id,
                    sensor_frame_id,
                )
            _LOG.debug("Transform error: %s", exc)
            return RigidTransform.identity()

    def _make_result(
        self,
        timestamp: float,
        estimate: MotionEstimate,
        first_run: bool,
        start_time: float,
        *,
        pose: Optional[StampedPose],
        twist: Optional[Twist],
        reset: bool = False,
    ) -> OdometryResult:
        runtime_sec: float = max(self._clock() - start_time, 0.0)
        return OdometryResult(
            pose=pose,
            twist=twist,
            diagnostics=build_diagnostics(
                timestamp=timestamp,
                estimate=estimate,
                first_run=first_run,
                runtime_sec=runtime_sec,
            ),
            reset=reset,
        )


def _check_frame_preconditions(image: np.ndarray, depth_source: Any) -> None:
    if depth_source is None:
        raise OdometryPreconditionError(
            "A depth source must be attached before processing frames"
        )
    if not isinstance(image, np.ndarray) or image.ndim != 2:
        raise OdometryPreconditionError("Expected a single channel 2D image")
    if image.dtype != np.uint8:
        raise OdometryPreconditionError(f"Expected an 8-bit image, got {image.dtype}")
    if image.strides[1] != 1 or image.strides[0] != image.shape[1]:
        raise OdometryPreconditionError(
            f"Image row stride {image.strides[0]} does not match "
            f"width {image.shape[1]}"
        )
