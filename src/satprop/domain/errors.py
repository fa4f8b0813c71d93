# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Error kinds raised by dynamics, event conditions and the numerical solver.

Configuration problems are raised at construction time. Evaluation problems
(divergence, dimension mismatch) abort the propagation in progress.
"""


class SatpropError(Exception):
    """Base class for all satprop errors."""
    pass


class UndefinedModelError(SatpropError, ValueError):
    """A model required by a contributor (e.g. gravity) is undefined."""

    def __init__(self, model_name: str) -> None:
        self.model_name = model_name
        super().__init__(f"{{{model_name}}} is undefined.")


class InvalidConfigurationError(SatpropError, ValueError):
    """Inconsistent or incomplete configuration."""
    pass


class ConditionContractError(InvalidConfigurationError):
    """A localization bracket does not contain a condition transition.

    Raised when the caller passes non-adjacent samples, so that the
    condition is already satisfied at the lower end of the bracket or
    not satisfied at the upper end.
    """
    pass


class NumericalDivergenceError(SatpropError, ArithmeticError):
    """Non-finite values or step-size collapse during integration."""
    pass


class DimensionMismatchError(SatpropError, ValueError):
    """A derivative contribution does not match the state dimension."""

    def __init__(self, expected: int, actual: int, source: str = "") -> None:
        self.expected = expected
        self.actual = actual
        where = f" from {source}" if source else ""
        super().__init__(
            f"Contribution{where} has dimension {actual}, expected {expected}"
        )
