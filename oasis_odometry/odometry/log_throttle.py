################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Rate limiting for repeated log messages."""

from __future__ import annotations

import time
from typing import Callable
from typing import Dict
from typing import Optional


class LogThrottle:
    """Allow one message per key within a fixed period of a monotonic clock."""

    def __init__(
        self, period_sec: float, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self._period_sec: float = float(period_sec)
        self._clock: Callable[[], float] = clock
        self._last_times: Dict[str, float] = {}

    def should_log(self, key: str) -> bool:
        now: float = self._clock()
        last_time: Optional[float] = self._last_times.get(key)
        if last_time is not None and now - last_time < self._period_sec:
            return False
        self._last_times[key] = now
        return True
