"""Execution module for the round-trip state machine, swaps and signing."""

from roundtrip.execution.backoff import FailureBackoff, RotatingBackoff
from roundtrip.execution.controller import ControllerConfig, RoundTripController
from roundtrip.execution.executor import DryRunSwapExecutor, LiveSwapExecutor
from roundtrip.execution.recovery import PositionRecovery, RecoveryResult
from roundtrip.execution.signer import SignerError, WalletSigner


__all__ = [
    "ControllerConfig",
    "DryRunSwapExecutor",
    "FailureBackoff",
    "LiveSwapExecutor",
    "PositionRecovery",
    "RecoveryResult",
    "RotatingBackoff",
    "RoundTripController",
    "SignerError",
    "WalletSigner",
]
