"""Strategy module for route selection and profit evaluation."""

from roundtrip.strategy.calculator import ProfitCalculator, evaluate_profit
from roundtrip.strategy.route_filter import RouteFilter


__all__ = [
    "ProfitCalculator",
    "RouteFilter",
    "evaluate_profit",
]
