# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Bisection on a boolean transition, used to localize events in time."""

from dataclasses import dataclass
from typing import Callable

from satprop.domain.errors import ConditionContractError


@dataclass(frozen=True)
class RootSolverSolution:
    """Result of a bracketing root search."""
    root: float
    iteration_count: int
    has_converged: bool


def bisection(
    predicate: Callable[[float], bool],
    lower: float,
    upper: float,
    tolerance: float,
    max_iterations: int = 100,
) -> RootSolverSolution:
    """Narrow the instant where predicate turns from False to True.

    lower and upper are the bracket ends in the direction of integration
    (upper may be smaller than lower when integrating backward). The
    returned root is always on the satisfied side of the transition.

    Raises:
        ConditionContractError: predicate(lower) is True or
            predicate(upper) is False, i.e. the bracket holds no transition.
    """
    if predicate(lower):
        raise ConditionContractError(
            f"Condition already satisfied at bracket start t={lower}: samples are not adjacent"
        )
    if not predicate(upper):
        raise ConditionContractError(
            f"Condition not satisfied at bracket end t={upper}: bracket holds no transition"
        )

    iterations = 0
    while abs(upper - lower) > tolerance and iterations < max_iterations:
        mid = lower + 0.5 * (upper - lower)
        if mid == lower or mid == upper:
            break
        if predicate(mid):
            upper = mid
        else:
            lower = mid
        iterations += 1

    return RootSolverSolution(
        root=upper,
        iteration_count=iterations,
        has_converged=abs(upper - lower) <= tolerance,
    )
