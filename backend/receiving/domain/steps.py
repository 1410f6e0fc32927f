# backend/receiving/domain/steps.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from .constants import ALL_STEPS, PHOTO_STEPS, STEP_ARRIVAL, STEP_QUANTITY, STEP_TITLES
from .errors import StepLockedError, ValidationError
from .photos import PhotoEvidenceTracker

LOCKED = "locked"
UNLOCKED = "unlocked"
COMPLETE = "complete"


def displayed_step(auto_advance: bool, first_incomplete: int, sticky_step: int) -> int:
    """Step shown to the operator, from two independent inputs."""
    if auto_advance:
        return first_incomplete
    # a sticky step can fall out of reach when photos are deleted
    return min(sticky_step, first_incomplete)


@dataclass(frozen=True)
class NavigationResult:
    step: int
    clamped: bool = False
    notice: Optional[str] = None


class StepGate:
    """
    Four sequential steps:
      1 arrival photos -> 2 post-unload photos -> 3 product/label photos -> 4 quantity entry

    Step k+1 opens when step k is complete; step 4 needs all of 1-3.
    Auto-advance is on until the operator navigates explicitly, then the
    chosen step sticks.
    """

    def __init__(self, tracker: PhotoEvidenceTracker):
        self.tracker = tracker
        self._auto_advance = True
        self._sticky_step = STEP_ARRIVAL

    @property
    def auto_advance(self) -> bool:
        return self._auto_advance

    def step_complete(self, step: int) -> bool:
        _check_step(step)
        if step == STEP_QUANTITY:
            # quantity entry has no photo slots; "complete" means reachable
            return self.max_accessible_step() == STEP_QUANTITY
        return self.tracker.step_complete(step)

    def max_accessible_step(self) -> int:
        for step in PHOTO_STEPS:
            if not self.tracker.step_complete(step):
                return step
        return STEP_QUANTITY

    def step_state(self, step: int) -> str:
        _check_step(step)
        if step > self.max_accessible_step():
            return LOCKED
        if step != STEP_QUANTITY and self.tracker.step_complete(step):
            return COMPLETE
        return UNLOCKED

    def states(self) -> Dict[int, str]:
        return {step: self.step_state(step) for step in ALL_STEPS}

    @property
    def current_step(self) -> int:
        return displayed_step(self._auto_advance, self.max_accessible_step(), self._sticky_step)

    def navigate_to(self, step: int) -> NavigationResult:
        """Move to ``step``; beyond-reach requests are clamped, not refused."""
        _check_step(step)
        reachable = self.max_accessible_step()
        self._auto_advance = False
        if step > reachable:
            self._sticky_step = reachable
            return NavigationResult(
                step=reachable,
                clamped=True,
                notice=f"Complete '{STEP_TITLES[reachable]}' before moving to step {step}.",
            )
        self._sticky_step = step
        return NavigationResult(step=step)

    def require_reachable(self, step: int) -> None:
        _check_step(step)
        reachable = self.max_accessible_step()
        if step > reachable:
            raise StepLockedError(step, reachable)


def _check_step(step) -> None:
    if isinstance(step, bool) or not isinstance(step, int) or step not in ALL_STEPS:
        raise ValidationError(f"step must be one of {list(ALL_STEPS)}, got {step!r}")
