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
Helpers for building per-frame odometry diagnostics
"""

from __future__ import annotations

from typing import List
from typing import Tuple

from oasis_odometry.odometry.odometry_types import FrameStatistics
from oasis_odometry.odometry.odometry_types import MotionEstimate
from oasis_odometry.odometry.odometry_types import OdometryDiagnostics


def build_diagnostics(
    *,
    timestamp: float,
    estimate: MotionEstimate,
    first_run: bool,
    runtime_sec: float,
) -> OdometryDiagnostics:
    return OdometryDiagnostics(
        timestamp=timestamp,
        status=estimate.status,
        status_description=estimate.status.description,
        first_run=first_run,
        statistics=estimate.statistics,
        runtime_sec=runtime_sec,
    )


def diagnostics_key_values(diagnostics: OdometryDiagnostics) -> List[Tuple[str, str]]:
    """
    Flatten a diagnostic record into ordered key/value string pairs

    Per-level keypoint counts are reported as comma separated lists, with
    one entry per pyramid level.
    """

    stats: FrameStatistics = diagnostics.statistics
    return [
        ("motion_estimate_status_code", str(int(diagnostics.status))),
        ("motion_estimate_status", diagnostics.status_description),
        ("motion_estimate_valid", str(stats.motion_estimate_valid)),
        ("first_run", str(diagnostics.first_run)),
        ("change_reference_frame", str(stats.change_reference_frame)),
        ("fast_threshold", str(stats.fast_threshold)),
        ("num_total_detected_keypoints", str(stats.num_total_detected_keypoints)),
        ("num_total_keypoints", str(stats.num_total_keypoints)),
        ("num_detected_keypoints", _join_counts(stats.num_detected_keypoints)),
        ("num_keypoints", _join_counts(stats.num_keypoints)),
        ("num_matches", str(stats.num_matches)),
        ("num_inliers", str(stats.num_inliers)),
        ("num_reprojection_failures", str(stats.num_reprojection_failures)),
        ("runtime", f"{diagnostics.runtime_sec:.6f}"),
    ]


def _join_counts(counts: Tuple[int, ...]) -> str:
    return ",".join(str(int(count)) for count in counts)
