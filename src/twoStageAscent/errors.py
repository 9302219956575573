# Licensed under the PolyForm Noncommercial License 1.0.0
"""Exceptions raised by the ascent simulator."""

from typing import Optional


class InvalidSpecification(ValueError):
    """Launch parameters violate a data-model invariant.

    Raised before any integration starts.
    """

    def __init__(self, field: str, constraint: str, value: Optional[float] = None):
        self.field = field
        self.constraint = constraint
        self.value = value
        super().__init__(f"{field} must be {constraint}, got {value}")


class IntegrationFault(ArithmeticError):
    """An integration step produced a non-finite state."""

    def __init__(self, time: float, stage: int, dt: float, message: str = "non-finite state"):
        self.time = time
        self.stage = stage
        self.dt = dt
        super().__init__(f"{message} at t={time:.3f}s (stage {stage}, dt={dt:g}s)")


class PhaseStepBudgetExceeded(RuntimeError):
    """A flight phase hit its step limit before its exit conditions."""

    def __init__(self, phase: str, steps: int, budget: int):
        self.phase = phase
        self.steps = steps
        self.budget = budget
        super().__init__(f"phase '{phase}' stopped after {steps} steps (budget {budget})")
