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
Frame processor interface and its owned lifecycle

The frame processor wraps an external visual odometry engine. It keeps its
own reference frame across calls, so the pose chain that owns it must be
able to discard it and build a fresh one on demand.
"""

from __future__ import annotations

import enum
from typing import Any
from typing import Callable
from typing import Mapping
from typing import Optional
from typing import Protocol
from typing import runtime_checkable

import numpy as np

from oasis_odometry.odometry.odometry_types import CameraIntrinsics
from oasis_odometry.odometry.odometry_types import MotionEstimate


class FrameProcessor(Protocol):
    """Stateful motion estimator fed with one image per call."""

    def process_frame(self, image: np.ndarray, depth_source: Any) -> MotionEstimate:
        """
        Estimate the sensor motion for a new grayscale image

        Args:
            image: Densely packed 2D uint8 image
            depth_source: Depth or stereo data matching the image, opaque to
                the caller

        Returns:
            The motion estimate, whose relative pose is expressed against the
            reference frame captured on the first call
        """
        ...


@runtime_checkable
class FeatureRenderer(Protocol):
    """Optional capability of processors that can draw their tracked features."""

    def render_features(self) -> Optional[np.ndarray]: ...


@runtime_checkable
class Closeable(Protocol):
    """Optional capability of processors holding external resources."""

    def close(self) -> None: ...


# Builds a processor from camera intrinsics and pass-through tuning options
FrameProcessorFactory = Callable[
    [Optional[CameraIntrinsics], Mapping[str, str]], FrameProcessor
]


class ProcessorSlotState(enum.Enum):
    """
    Lifecycle states of the owned frame processor

    Attributes:
        ABSENT: No processor exists, the next frame creates one
        ACTIVE: A processor exists and holds a reference frame
    """

    ABSENT = "absent"
    ACTIVE = "active"


class FrameProcessorSlot:
    """
    Exclusive owner of at most one frame processor instance
    """

    def __init__(self, factory: FrameProcessorFactory) -> None:
        self._factory: FrameProcessorFactory = factory
        self._processor: Optional[FrameProcessor] = None

    @property
    def state(self) -> ProcessorSlotState:
        if self._processor is None:
            return ProcessorSlotState.ABSENT
        return ProcessorSlotState.ACTIVE

    @property
    def processor(self) -> Optional[FrameProcessor]:
        return self._processor

    def activate(
        self, intrinsics: Optional[CameraIntrinsics], options: Mapping[str, str]
    ) -> FrameProcessor:
        """
        Create the processor if absent and return the live instance
        """

        if self._processor is None:
            self._processor = self._factory(intrinsics, options)
        return self._processor

    def reset(self) -> bool:
        """
        Destroy the live processor, returning True if one existed
        """

        processor: Optional[FrameProcessor] = self._processor
        if processor is None:
            return False

        self._processor = None
        if isinstance(processor, Closeable):
            processor.close()
        return True
