"""
One-dimensional root finders.

`Solver1D.solve(f, accuracy, guess, step)` first brackets a root by
expanding geometrically from `guess`, then hands the bracket to the concrete
algorithm. `f` is any callable; Newton-based solvers also need
`f.derivative(x)`.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from scipy.optimize import brentq

from .errors import ConvergenceError
from .settings import DEFAULT_MAX_ITERATIONS

logger = logging.getLogger(__name__)

GROWTH_FACTOR = 1.6


class Solver1D:
    def __init__(self, max_evaluations: int = DEFAULT_MAX_ITERATIONS,
                 lower_bound: Optional[float] = None,
                 upper_bound: Optional[float] = None):
        self.max_evaluations = int(max_evaluations)
        self.lower_bound = lower_bound
        self.upper_bound = upper_bound
        self.evaluations = 0

    def set_max_evaluations(self, n: int) -> None:
        self.max_evaluations = int(n)

    def _enforce_bounds(self, x: float) -> float:
        if self.lower_bound is not None and x < self.lower_bound:
            return self.lower_bound
        if self.upper_bound is not None and x > self.upper_bound:
            return self.upper_bound
        return x

    def solve(self, f: Callable[[float], float], accuracy: float, guess: float, step: float) -> float:
        if accuracy <= 0.0:
            raise ValueError(f"accuracy ({accuracy}) must be positive")
        # avoid chasing accuracy below machine precision
        accuracy = max(accuracy, 2.220446049250313e-16)

        root = guess
        fx_max = f(root)
        if fx_max == 0.0:
            self.evaluations = 1
            return root

        if fx_max > 0.0:
            x_min = self._enforce_bounds(root - step)
            fx_min = f(x_min)
            x_max = root
        else:
            x_min = root
            fx_min = fx_max
            x_max = self._enforce_bounds(root + step)
            fx_max = f(x_max)

        evaluations = 2
        while evaluations <= self.max_evaluations:
            if fx_min * fx_max <= 0.0:
                if fx_min == 0.0:
                    self.evaluations = evaluations
                    return x_min
                if fx_max == 0.0:
                    self.evaluations = evaluations
                    return x_max
                logger.debug(f"Root bracketed in [{x_min}, {x_max}] after {evaluations} evaluations")
                self.evaluations = evaluations
                return self._solve_bracketed(f, accuracy, x_min, fx_min, x_max, fx_max)

            if abs(fx_min) < abs(fx_max):
                x_min = self._enforce_bounds(x_min + GROWTH_FACTOR * (x_min - x_max))
                fx_min = f(x_min)
            else:
                x_max = self._enforce_bounds(x_max + GROWTH_FACTOR * (x_max - x_min))
                fx_max = f(x_max)
            evaluations += 1

        raise ConvergenceError(
            f"unable to bracket root in {self.max_evaluations} function evaluations "
            f"(last bracket: f[{x_min}, {x_max}] -> [{fx_min}, {fx_max}])"
        )

    def _solve_bracketed(self, f, accuracy, x_min, fx_min, x_max, fx_max) -> float:
        raise NotImplementedError


class Brent(Solver1D):
    """Brent's method on the bracket, via scipy.optimize.brentq."""

    def _solve_bracketed(self, f, accuracy, x_min, fx_min, x_max, fx_max) -> float:
        remaining = max(self.max_evaluations - self.evaluations, 1)
        root, result = brentq(
            f, x_min, x_max, xtol=accuracy, maxiter=remaining, full_output=True, disp=False
        )
        self.evaluations += result.function_calls
        if not result.converged:
            raise ConvergenceError(
                f"maximum number of function evaluations ({self.max_evaluations}) exceeded "
                f"({result.flag})"
            )
        logger.debug(f"Brent converged to {root} in {self.evaluations} evaluations")
        return float(root)


class NewtonSafe(Solver1D):
    """Newton-Raphson steps, falling back to bisection when a step leaves the bracket."""

    def _solve_bracketed(self, f, accuracy, x_min, fx_min, x_max, fx_max) -> float:
        # orient the search so that f(xl) < 0
        if fx_min < 0.0:
            xl, xh = x_min, x_max
        else:
            xh, xl = x_min, x_max

        dx_old = x_max - x_min
        dx = dx_old

        root = 0.5 * (x_min + x_max)
        froot = f(root)
        dfroot = f.derivative(root)
        evaluations = self.evaluations + 1

        while evaluations <= self.max_evaluations:
            out_of_range = ((root - xh) * dfroot - froot) * ((root - xl) * dfroot - froot) > 0.0
            too_slow = abs(2.0 * froot) > abs(dx_old * dfroot)

            if out_of_range or too_slow:
                dx_old = dx
                dx = 0.5 * (xh - xl)
                root = xl + dx
            else:
                dx_old = dx
                dx = froot / dfroot
                root -= dx

            if abs(dx) < accuracy:
                self.evaluations = evaluations
                logger.debug(f"NewtonSafe converged to {root} in {self.evaluations} evaluations")
                return root

            froot = f(root)
            dfroot = f.derivative(root)
            evaluations += 1

            if froot < 0.0:
                xl = root
            else:
                xh = root

        self.evaluations = evaluations
        raise ConvergenceError(
            f"maximum number of function evaluations ({self.max_evaluations}) exceeded"
        )
