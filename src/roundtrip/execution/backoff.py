"""
Retry delay policies.

The two legs fail very differently. A failed opening leg leaves nothing
open, so the outer loop slows down linearly with consecutive failures.
A failed closing leg leaves tokens stranded and must be retried forever,
so its delay ramps up and then restarts from zero to keep checking the
market regularly.
"""

from dataclasses import dataclass


@dataclass(slots=True)
class FailureBackoff:
    """
    Linear backoff on consecutive failures.

    The delay is base_delay * failures and drops to zero on success.
    """

    base_delay: float
    failures: int = 0

    def record_failure(self) -> None:
        """Count one more consecutive failure."""
        self.failures += 1

    def record_success(self) -> None:
        """Clear the failure streak."""
        self.failures = 0

    @property
    def delay(self) -> float:
        """Current wait in seconds."""
        return self.base_delay * self.failures


@dataclass(slots=True)
class RotatingBackoff:
    """
    Linear backoff that restarts after a fixed number of attempts.

    Successive calls to next_delay() return base * 0, base * 1, ...,
    base * (reset_after - 1) and then start over at zero.
    """

    base_delay: float
    reset_after: int
    attempt: int = 0

    def __post_init__(self) -> None:
        if self.reset_after < 1:
            raise ValueError(f"reset_after must be at least 1, got {self.reset_after}")

    def next_delay(self) -> float:
        """Return the wait for the current attempt and advance."""
        delay = self.base_delay * self.attempt
        self.attempt += 1
        if self.attempt >= self.reset_after:
            self.attempt = 0
        return delay

    def reset(self) -> None:
        """Restart the ramp."""
        self.attempt = 0
