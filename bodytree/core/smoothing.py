from __future__ import annotations

from collections import deque
from typing import Iterable

import numpy as np

from bodytree.core.constants import SMOOTHING_WINDOW


class SmoothingBuffer:
    """Bounded FIFO of vector samples whose arithmetic mean is the smoothed value."""

    def __init__(self, first_sample: Iterable[float], window: int = SMOOTHING_WINDOW):
        self.window = max(1, int(window))
        first = np.array(first_sample, dtype=float)
        self.size = int(first.shape[0])
        self._samples: deque[np.ndarray] = deque(maxlen=self.window)
        self._samples.append(first)

    def push(self, sample: Iterable[float]) -> None:
        point = np.array(sample, dtype=float)
        if point.shape != (self.size,):
            raise ValueError(f"expected {self.size} components, got shape {point.shape}")
        # deque(maxlen) drops the oldest sample once full.
        self._samples.append(point)

    def mean(self) -> np.ndarray:
        return np.mean(np.stack(self._samples), axis=0)

    def samples(self) -> list[np.ndarray]:
        return [np.array(s, dtype=float) for s in self._samples]

    def __len__(self) -> int:
        return len(self._samples)
