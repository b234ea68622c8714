from dataclasses import dataclass
from enum import Enum
from typing import Callable, Tuple, Union

EasingFunction = Callable[[float], float]


@dataclass(frozen=True)
class ViewTransform:
    """Maps interior frame coordinates to viewport pixels: p -> translate + scale * p."""

    translate_x: float = 0.0
    translate_y: float = 0.0
    scale: float = 1.0

    def apply(self, x: float, y: float) -> Tuple[float, float]:
        return self.translate_x + self.scale * x, self.translate_y + self.scale * y

    def invert(self, px: float, py: float) -> Tuple[float, float]:
        return (px - self.translate_x) / self.scale, (py - self.translate_y) / self.scale

    def interpolate(self, other: "ViewTransform", t: float) -> "ViewTransform":
        return ViewTransform(
            self.translate_x + (other.translate_x - self.translate_x) * t,
            self.translate_y + (other.translate_y - self.translate_y) * t,
            self.scale + (other.scale - self.scale) * t,
        )

    def is_close(self, other: "ViewTransform", tol: float = 1e-9) -> bool:
        return (
            abs(self.translate_x - other.translate_x) <= tol
            and abs(self.translate_y - other.translate_y) <= tol
            and abs(self.scale - other.scale) <= tol
        )


def linear(t: float) -> float:
    return t


def quad_out(t: float) -> float:
    return t * (2 - t)


def cubic_out(t: float) -> float:
    t -= 1
    return t * t * t + 1


def cubic_in_out(t: float) -> float:
    t *= 2
    if t <= 1:
        return t * t * t / 2
    t -= 2
    return (t * t * t + 2) / 2


class Easing(str, Enum):
    linear = "linear"
    quad_out = "quad_out"
    cubic_out = "cubic_out"
    cubic_in_out = "cubic_in_out"


_EASING_FUNCTIONS = {
    Easing.linear: linear,
    Easing.quad_out: quad_out,
    Easing.cubic_out: cubic_out,
    Easing.cubic_in_out: cubic_in_out,
}


def resolve_easing(easing: Union[str, Easing, EasingFunction]) -> EasingFunction:
    if callable(easing):
        return easing
    try:
        return _EASING_FUNCTIONS[Easing(easing)]
    except ValueError:
        raise ValueError(
            f"Invalid easing: {easing}. "
            f'Please select one from: {", ".join(e.value for e in Easing)} or pass a callable.'
        )


class Transition:
    """Time based interpolation between two view transforms.

    The value at any time is a complete `ViewTransform`, so a transition can be dropped at any
    point and its last sampled value used as the start of the next one.
    """

    def __init__(
        self,
        start: ViewTransform,
        end: ViewTransform,
        started_at: float,
        duration_ms: float = 300,
        easing: EasingFunction = cubic_out,
    ):
        self.start = start
        self.end = end
        self.started_at = started_at
        self.duration = max(0.0, duration_ms) / 1000
        self.easing = easing

    def progress(self, now: float) -> float:
        if self.duration <= 0:
            return 1.0
        return min(1.0, max(0.0, (now - self.started_at) / self.duration))

    def finished(self, now: float) -> bool:
        return self.progress(now) >= 1.0

    def value_at(self, now: float) -> ViewTransform:
        t = self.progress(now)
        if t >= 1.0:
            return self.end
        return self.start.interpolate(self.end, self.easing(t))
