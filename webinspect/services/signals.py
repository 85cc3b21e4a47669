"""
Measurement providers for the signals these audits cannot observe from a
single HTTP response: paint timings, CSS/JS coverage, cache behaviour and
colour contrast.

``SimulatedSignalSource`` draws from the same ranges the web client has
always displayed. ``FixedSignalSource`` returns constant values and is what
tests (and ``SIGNAL_SOURCE=fixed`` deployments) use for reproducible scores.
"""
import math
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Tuple

from ..config import get_settings


@dataclass(frozen=True)
class PaintTimings:
    first_contentful_paint: float
    largest_contentful_paint: float
    first_input_delay: float
    cumulative_layout_shift: float
    total_blocking_time: float
    speed_index: float


class SignalSource(ABC):
    @abstractmethod
    def paint_timings(self) -> PaintTimings:
        ...

    @abstractmethod
    def css_coverage(self) -> Tuple[int, int]:
        """(unused CSS %, minification savings %)"""

    @abstractmethod
    def js_coverage(self) -> Tuple[int, int]:
        """(unused JS %, minification savings %)"""

    @abstractmethod
    def cache_profile(self) -> Tuple[int, int, float]:
        """(cacheable, non-cacheable, hit ratio)"""

    @abstractmethod
    def contrast_ratios(self) -> Tuple[float, float]:
        """(average ratio, worst ratio)"""


class SimulatedSignalSource(SignalSource):
    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def _between(self, low: float, span: float) -> float:
        return self._rng.random() * span + low

    def paint_timings(self) -> PaintTimings:
        return PaintTimings(
            first_contentful_paint=self._between(500, 2000),
            largest_contentful_paint=self._between(1000, 3000),
            first_input_delay=self._between(50, 200),
            cumulative_layout_shift=self._between(0, 0.3),
            total_blocking_time=self._between(100, 500),
            speed_index=self._between(1000, 4000),
        )

    def css_coverage(self) -> Tuple[int, int]:
        return math.floor(self._between(10, 30)), math.floor(self._between(5, 20))

    def js_coverage(self) -> Tuple[int, int]:
        return math.floor(self._between(15, 25)), math.floor(self._between(10, 15))

    def cache_profile(self) -> Tuple[int, int, float]:
        return (
            math.floor(self._between(60, 80)),
            math.floor(self._between(10, 20)),
            self._between(0.6, 0.4),
        )

    def contrast_ratios(self) -> Tuple[float, float]:
        return self._between(4.2, 3), self._between(2.1, 2)


@dataclass(frozen=True)
class FixedSignalSource(SignalSource):
    first_contentful_paint: float = 1200
    largest_contentful_paint: float = 2000
    first_input_delay: float = 80
    cumulative_layout_shift: float = 0.05
    total_blocking_time: float = 200
    speed_index: float = 2500
    unused_css: int = 10
    css_minification_savings: int = 5
    unused_js: int = 15
    js_minification_savings: int = 10
    cacheable: int = 80
    non_cacheable: int = 20
    cache_hit_ratio: float = 0.9
    average_contrast: float = 7.0
    worst_contrast: float = 3.0

    def paint_timings(self) -> PaintTimings:
        return PaintTimings(
            first_contentful_paint=self.first_contentful_paint,
            largest_contentful_paint=self.largest_contentful_paint,
            first_input_delay=self.first_input_delay,
            cumulative_layout_shift=self.cumulative_layout_shift,
            total_blocking_time=self.total_blocking_time,
            speed_index=self.speed_index,
        )

    def css_coverage(self) -> Tuple[int, int]:
        return self.unused_css, self.css_minification_savings

    def js_coverage(self) -> Tuple[int, int]:
        return self.unused_js, self.js_minification_savings

    def cache_profile(self) -> Tuple[int, int, float]:
        return self.cacheable, self.non_cacheable, self.cache_hit_ratio

    def contrast_ratios(self) -> Tuple[float, float]:
        return self.average_contrast, self.worst_contrast


def get_signal_source() -> SignalSource:
    if get_settings().signal_source.lower() == "fixed":
        return FixedSignalSource()
    return SimulatedSignalSource()
