"""
Jupiter round-trip arbitrage engine.

Repeatedly prices a base -> intermediate -> base round trip through the
Jupiter aggregator and executes both legs when the quoted net profit
clears the configured threshold.
"""

__version__ = "0.1.0"
