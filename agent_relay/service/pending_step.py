"""Single-slot holder for a session's deferred transaction step."""

from __future__ import annotations

import logging
from typing import Optional

from agent_relay.models.flow import PendingStep

logger = logging.getLogger(__name__)


class PendingStepSlot:
    """
    Holds at most one ``PendingStep``.

    ``set`` overwrites (last write wins); ``take_and_clear`` hands the step
    out exactly once; ``discard`` drops it without execution.
    """

    __slots__ = ("_step",)

    def __init__(self) -> None:
        self._step: Optional[PendingStep] = None

    def set(self, step: PendingStep) -> None:
        if self._step is not None:
            logger.debug("Replacing pending step %s/%s", self._step.tool, self._step.step)
        self._step = step

    def take_and_clear(self) -> Optional[PendingStep]:
        step, self._step = self._step, None
        return step

    def discard(self) -> None:
        self._step = None

    def peek(self) -> Optional[PendingStep]:
        return self._step

    def __bool__(self) -> bool:
        return self._step is not None
