"""Configurator state around the sizing engine: text, manual steps, last stable fit."""
from typing import Optional

from tonnentext.labels.constants import DEFAULT_COLOR, DEFAULT_FONT_FAMILY, MAX_TEXT_LENGTH, MIN_QUANTITY
from tonnentext.labels.models import LabelConfiguration, normalize_text
from tonnentext.logging import get_logger, sanitize_string_for_logging
from .engine import DEFAULT_BOX_PADDING, FitState, SizingEngine

logger = get_logger(__name__)


class SizingSession:
    """
    Holds what the preview shows between keystrokes and resizes.

    Changing the (normalized) text resets the manual steps to 0 before the
    next fit.
    """

    def __init__(self, engine: SizingEngine, box_padding: float = DEFAULT_BOX_PADDING):
        self.engine = engine
        self.box_padding = box_padding
        self.box_width: Optional[float] = None
        self._text = ""
        self._user_steps = 0
        self._state = FitState.initial()

    @property
    def text(self) -> str:
        return self._text

    @property
    def user_steps(self) -> int:
        return self._user_steps

    @property
    def state(self) -> FitState:
        return self._state

    @property
    def plus_disabled(self) -> bool:
        return not self.engine.can_grow(self._state)

    @property
    def minus_disabled(self) -> bool:
        return not self.engine.can_shrink(self._state)

    def refit(self) -> FitState:
        if self.box_width is None:
            return self._state
        self._state = self.engine.fit(
            self._text,
            self.box_width,
            self.box_padding,
            self._user_steps,
            previous=self._state,
        )
        return self._state

    def set_text(self, raw: str) -> FitState:
        """Normalize input (bounded to the max label length) and refit."""
        text = normalize_text(raw)[:MAX_TEXT_LENGTH].rstrip()
        if text != self._text:
            self._text = text
            self._user_steps = 0
        return self.refit()

    def resize(self, box_width: float) -> FitState:
        self.box_width = box_width
        return self.refit()

    def increase(self) -> FitState:
        if self.engine.can_grow(self._state):
            self._user_steps += 1
            return self.refit()
        return self._state

    def decrease(self) -> FitState:
        if self.engine.can_shrink(self._state):
            self._user_steps -= 1
            return self.refit()
        return self._state

    def reset(self) -> FitState:
        self._user_steps = 0
        return self.refit()

    def build_configuration(
        self,
        quantity: int = MIN_QUANTITY,
        font_family: str = DEFAULT_FONT_FAMILY,
        color: str = DEFAULT_COLOR,
    ) -> LabelConfiguration:
        """
        Capture the current fit as an immutable configuration.

        Raises:
            ValueError: If there is no text or the preview has not been measured for it
        """
        if not self._text:
            raise ValueError("Bitte geben Sie einen Text ein")
        state = self._state
        if state.text != self._text:
            state = self.refit()
        if state.text != self._text or state.is_placeholder:
            raise ValueError("preview has not been measured for the current text")

        config = LabelConfiguration.create(
            text=self._text,
            font_size_px=state.pixel_size,
            quantity=quantity,
            font_family=font_family,
            color=color,
        )
        logger.info(
            "Configured label %s at %.2fpx / %.2fpt x%d",
            sanitize_string_for_logging(config.text), config.font_size_px, config.font_size_pt, quantity,
        )
        return config
