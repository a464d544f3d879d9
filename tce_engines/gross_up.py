"""
tce_engines.gross_up -- Net-to-gross salary solver.

Responsibility:
    Find the gross monthly salary whose take-home pay, after the
    employee insurance share and progressive income tax, equals a
    guaranteed net amount.  Used by net contracts.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Depends on
    ``tce_engines.tax_brackets``.

Algorithm:
    calculated_net(g) = g - employee_rate * g - monthly_tax(g) is
    piecewise linear with slope (1 - employee_rate - marginal_rate) in
    (0, 1 - employee_rate].  Starting from g0 = net / (1 - employee_rate),
    exact in the zero-rate bracket, each step adds the residual
    net - calculated_net(g).  The error shrinks by the factor
    (employee_rate + marginal_rate) per step, so the loop stops on a
    residual threshold; max_iterations is only a safety bound.

Invariants enforced:
    - No rounding inside the loop.
    - Always returns a result; ``converged`` records whether the
      residual reached the tolerance.

Failure modes:
    - Non-convergence is reported in ``GrossUpResult.converged`` and
      logged as a warning; ``strict=True`` raises
      ``GrossUpNotConvergedError`` instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from tce_engines.tax_brackets import TaxBracketEvaluator
from tce_engines.tracer import traced_engine
from tce_kernel.exceptions import GrossUpNotConvergedError
from tce_kernel.logging_config import get_logger

logger = get_logger("engines.gross_up")

DEFAULT_MAX_ITERATIONS = 100
DEFAULT_TOLERANCE = Decimal("1")

_ZERO = Decimal("0")


@dataclass(frozen=True)
class GrossUpResult:
    """
    Outcome of a net-to-gross solve.

    residual is target_net minus the net recomputed from ``gross``.
    """

    gross: Decimal
    target_net: Decimal
    residual: Decimal
    iterations: int
    converged: bool


class GrossUpSolver:
    """
    Residual-driven fixed-point solver for the gross salary of a net contract.

    Contract:
        Pure; no I/O.  The tax evaluator and insurance rate are injected.
    Guarantees:
        - When ``converged`` is True, ``|residual| < tolerance``.
        - Non-positive targets return a zero gross immediately.
    """

    def __init__(
        self,
        tax_evaluator: TaxBracketEvaluator,
        employee_insurance_rate: Decimal = Decimal("0.07"),
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        tolerance: Decimal = DEFAULT_TOLERANCE,
    ):
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        if tolerance <= _ZERO:
            raise ValueError("tolerance must be positive")
        if employee_insurance_rate >= Decimal("1"):
            raise ValueError("employee_insurance_rate must be below 1")
        self._tax = tax_evaluator
        self._employee_rate = employee_insurance_rate
        self._max_iterations = max_iterations
        self._tolerance = tolerance

    def calculated_net(self, gross: Decimal) -> Decimal:
        """Take-home pay for a gross salary: gross minus insurance share and tax."""
        return gross - self._employee_rate * gross - self._tax.monthly_tax(gross)

    @traced_engine("gross_up", "1.0", fingerprint_fields=("net_monthly",))
    def gross_up_from_net(
        self,
        net_monthly: Decimal,
        strict: bool = False,
    ) -> GrossUpResult:
        """
        Solve for the gross monthly salary that yields ``net_monthly``.

        Args:
            net_monthly: Guaranteed take-home amount.
            strict: Raise instead of returning an unconverged result.

        Returns:
            GrossUpResult with the gross, final residual and iteration count.

        Raises:
            GrossUpNotConvergedError: only when ``strict`` and the residual
                did not reach the tolerance within ``max_iterations``.
        """
        if net_monthly <= _ZERO:
            return GrossUpResult(
                gross=_ZERO,
                target_net=net_monthly,
                residual=_ZERO,
                iterations=0,
                converged=True,
            )

        gross = net_monthly / (Decimal("1") - self._employee_rate)
        diff = net_monthly - self.calculated_net(gross)
        iterations = 0
        while abs(diff) >= self._tolerance and iterations < self._max_iterations:
            gross += diff
            diff = net_monthly - self.calculated_net(gross)
            iterations += 1

        converged = abs(diff) < self._tolerance
        result = GrossUpResult(
            gross=gross,
            target_net=net_monthly,
            residual=diff,
            iterations=iterations,
            converged=converged,
        )

        if not converged:
            logger.warning("gross_up_not_converged", extra={
                "target_net": str(net_monthly),
                "gross": str(gross),
                "residual": str(diff),
                "iterations": iterations,
                "max_iterations": self._max_iterations,
            })
            if strict:
                raise GrossUpNotConvergedError(
                    target_net=net_monthly,
                    gross=gross,
                    residual=diff,
                    iterations=iterations,
                )
        else:
            logger.debug("gross_up_completed", extra={
                "target_net": str(net_monthly),
                "gross": str(gross),
                "residual": str(diff),
                "iterations": iterations,
                "marginal_rate": str(self._tax.marginal_rate(gross)),
            })

        return result
