"""
Auto-fit sizing engine.

Picks the largest font size that keeps a single line of text inside a
measured box, then applies the customer's manual +/- steps in points.
Stateless per call: the caller owns the previous state and passes it in.
"""
from dataclasses import dataclass
from typing import Optional

from tonnentext.errors import MeasurementUnavailable
from tonnentext.labels.constants import PLACEHOLDER_TEXT, STEP_PT
from tonnentext.logging import get_logger
from tonnentext.units import pt_to_px, px_to_pt
from .measure import TextMeasurer

logger = get_logger(__name__)

MIN_PIXEL_SIZE = 14.0
MAX_PIXEL_SIZE = 56.0
DEFAULT_PIXEL_SIZE = 36.0
DEFAULT_BOX_PADDING = 16.0

# Search increment; also the re-shrink decrement
PIXEL_STEP = 1.0
# Smallest size tried when even the readability floor does not fit
ABSOLUTE_MIN_PIXEL_SIZE = 1.0


@dataclass(frozen=True)
class SizingLimits:
    """Global size bounds. Point bounds are exact conversions of the pixel bounds."""
    min_px: float = MIN_PIXEL_SIZE
    max_px: float = MAX_PIXEL_SIZE
    step_pt: float = STEP_PT

    def __post_init__(self):
        if not 0 < self.min_px <= self.max_px:
            raise ValueError("limits must satisfy 0 < min_px <= max_px")
        if self.step_pt <= 0:
            raise ValueError("step_pt must be positive")

    @property
    def min_pt(self) -> float:
        return px_to_pt(self.min_px)

    @property
    def max_pt(self) -> float:
        return px_to_pt(self.max_px)


@dataclass(frozen=True)
class FitState:
    """Result of one fit. ``point_size`` is always ``px_to_pt(pixel_size)``."""
    text: str
    pixel_size: float
    point_size: float
    base_pixel_size: float
    user_steps: int = 0
    box_width: float = 0.0
    box_padding: float = DEFAULT_BOX_PADDING
    is_placeholder: bool = False

    @classmethod
    def initial(cls, pixel_size: float = DEFAULT_PIXEL_SIZE) -> "FitState":
        """State shown before the first successful measurement."""
        return cls(
            text="",
            pixel_size=pixel_size,
            point_size=px_to_pt(pixel_size),
            base_pixel_size=pixel_size,
            is_placeholder=True,
        )

    @property
    def available_width(self) -> float:
        return self.box_width - self.box_padding


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class SizingEngine:
    """
    Fit text into a box across px / pt.

    Every width check goes through the injected ``TextMeasurer`` so the
    fit search, the user adjustment and ``can_grow`` agree with each other.
    """

    def __init__(self, measurer: TextMeasurer, limits: Optional[SizingLimits] = None):
        self.measurer = measurer
        self.limits = limits or SizingLimits()

    def _fits(self, text: str, pixel_size: float, available: float) -> bool:
        return self.measurer.measure(text, pixel_size) <= available

    def _base_fit(self, text: str, available: float) -> float:
        """Largest size on the 1px grid from ``min_px`` that fits, capped at ``max_px``."""
        limits = self.limits
        size = limits.min_px

        if not self._fits(text, size, available):
            # Box narrower than the readability floor: the fit guarantee wins
            while size - PIXEL_STEP >= ABSOLUTE_MIN_PIXEL_SIZE:
                size -= PIXEL_STEP
                if self._fits(text, size, available):
                    return size
            raise MeasurementUnavailable("text cannot fit the box at any size")

        # Linear scan: rendered width is not strictly monotonic at sub-pixel level
        while size + PIXEL_STEP <= limits.max_px:
            candidate = size + PIXEL_STEP
            if not self._fits(text, candidate, available):
                break
            size = candidate
        return size

    def _adjusted_pixel_size(self, base: float, user_steps: int) -> float:
        """Apply ``user_steps`` in points, clamp to the global bounds, back to pixels."""
        limits = self.limits
        adjusted_pt = px_to_pt(base) + user_steps * limits.step_pt
        # Clamped values map to the exact pixel bounds, no round trip through pt
        if adjusted_pt <= limits.min_pt:
            return limits.min_px
        if adjusted_pt >= limits.max_pt:
            return limits.max_px
        return _clamp(pt_to_px(adjusted_pt), limits.min_px, limits.max_px)

    def _compute(self, text: str, box_width: float, box_padding: float, user_steps: int) -> FitState:
        available = box_width - box_padding
        if available <= 0:
            raise MeasurementUnavailable("box not laid out")

        is_placeholder = not text
        measured = text or PLACEHOLDER_TEXT
        base = self._base_fit(measured, available)

        if user_steps == 0:
            desired = base
        else:
            desired = self._adjusted_pixel_size(base, user_steps)
            # Re-shrink only; never grow past what fits
            while desired > self.limits.min_px and not self._fits(measured, desired, available):
                desired = max(desired - PIXEL_STEP, self.limits.min_px)
            if not self._fits(measured, desired, available):
                desired = base

        return FitState(
            text=text,
            pixel_size=desired,
            point_size=px_to_pt(desired),
            base_pixel_size=base,
            user_steps=user_steps,
            box_width=box_width,
            box_padding=box_padding,
            is_placeholder=is_placeholder,
        )

    def fit(
        self,
        text: str,
        box_width: float,
        box_padding: float = DEFAULT_BOX_PADDING,
        user_steps: int = 0,
        previous: Optional[FitState] = None,
    ) -> FitState:
        """
        Fit ``text`` (already normalized) into ``box_width - box_padding``.

        Never raises: when the box cannot be measured the previous stable
        state is returned unchanged (or the initial state if there is none).
        """
        try:
            return self._compute(text, box_width, box_padding, user_steps)
        except MeasurementUnavailable as e:
            logger.debug("Measurement unavailable (%s); keeping previous fit", e)
            return previous if previous is not None else FitState.initial()

    def can_grow(self, state: FitState) -> bool:
        """Whether one more ``+`` step would produce a larger size that still fits."""
        if state.available_width <= 0:
            return False
        measured = state.text or PLACEHOLDER_TEXT
        candidate = self._adjusted_pixel_size(state.base_pixel_size, state.user_steps + 1)
        if candidate <= state.pixel_size:
            return False
        try:
            return self._fits(measured, candidate, state.available_width)
        except MeasurementUnavailable:
            return False

    def can_shrink(self, state: FitState) -> bool:
        """Whether a ``-`` step can still reduce the size."""
        return state.pixel_size > self.limits.min_px
