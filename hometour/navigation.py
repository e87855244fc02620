from __future__ import annotations

# 0 is the intro card, 1..9 are the survey steps, 10 is the thank-you page.
FIRST_STEP = 0
LAST_STEP = 10
PRINT_STEPS = range(1, 10)


class WizardNavigator:
    def __init__(self, step: int = FIRST_STEP) -> None:
        self._step = FIRST_STEP
        self.go_to(step)

    def current(self) -> int:
        return self._step

    def go_to(self, step: int) -> int:
        if not FIRST_STEP <= step <= LAST_STEP:
            raise ValueError(f"Step {step} is outside {FIRST_STEP}..{LAST_STEP}")
        self._step = step
        return self._step

    def next(self) -> int:
        return self.go_to(min(self._step + 1, LAST_STEP))

    def back(self) -> int:
        return self.go_to(max(self._step - 1, FIRST_STEP))

    def __repr__(self) -> str:
        return f"WizardNavigator(step={self._step})"
