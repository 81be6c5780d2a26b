"""
Round-trip profit evaluation.

All figures are in base token units. The fee is a fixed per-round-trip
cost, not a rate.
"""

from roundtrip.core.types import ProfitEstimate


def evaluate_profit(input_amount: float, output_amount: float, fee: float) -> ProfitEstimate:
    """
    Compute gross and net profit of a round trip.

    Args:
        input_amount: Base amount sent into leg 1.
        output_amount: Base amount returned by leg 2.
        fee: Fixed cost of the round trip.

    Returns:
        ProfitEstimate with gross = output - input and net = gross - fee.

    Example:
        >>> evaluate_profit(100.0, 100.5, 0.1).net
        0.4
    """
    gross = output_amount - input_amount
    return ProfitEstimate(
        input_amount=input_amount,
        output_amount=output_amount,
        gross=gross,
        net=gross - fee,
    )


class ProfitCalculator:
    """Profit evaluator bound to the configured transaction fee."""

    __slots__ = ("_fee",)

    def __init__(self, fee: float) -> None:
        self._fee = fee

    @property
    def fee(self) -> float:
        """Get the fixed round-trip fee."""
        return self._fee

    def evaluate(self, input_amount: float, output_amount: float) -> ProfitEstimate:
        """Evaluate a round trip with the bound fee."""
        return evaluate_profit(input_amount, output_amount, self._fee)
