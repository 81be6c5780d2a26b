"""
Append-only profit ledger.

One line per completed round trip, written through its own queue so the
file write never runs on the event loop. The ledger logger does not
propagate; its lines never show up in the console log.
"""

import logging
from collections.abc import Iterable
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path
from queue import Queue

from roundtrip.config.constants import LEDGER_FORMAT, LOG_DATE_FORMAT, MAX_LOG_QUEUE_SIZE
from roundtrip.core.types import ProfitEstimate
from roundtrip.telemetry.logger import MicrosecondFormatter


LEDGER_LOGGER_NAME = "roundtrip.ledger"


def format_entry(profit: ProfitEstimate, tx_ids: Iterable[str | None] = ()) -> str:
    """
    Render one ledger line body.

    Example:
        >>> format_entry(ProfitEstimate(1.0, 1.035, 0.035, 0.025))
        'GROSS: 0.035000 - NET: 0.025000 | IN: 1.000000 OUT: 1.035000'
    """
    line = (
        f"GROSS: {profit.gross:.6f} - NET: {profit.net:.6f} | "
        f"IN: {profit.input_amount:.6f} OUT: {profit.output_amount:.6f}"
    )
    ids = [tx for tx in tx_ids if tx]
    if ids:
        line += f" | TX: {','.join(ids)}"
    return line


class ProfitLedger:
    """File-backed profit sink."""

    def __init__(self, path: Path) -> None:
        """
        Initialize ledger.

        Args:
            path: File to append to; parent directories are created.
        """
        self._path = path
        self._queue: Queue[logging.LogRecord] = Queue(maxsize=MAX_LOG_QUEUE_SIZE)
        self._logger = logging.getLogger(LEDGER_LOGGER_NAME)
        self._queue_handler: QueueHandler | None = None
        self._listener: QueueListener | None = None
        self._entries = 0

    def start(self) -> None:
        """Open the file and start the writer thread."""
        if self._listener is not None:
            return

        self._path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(self._path, mode="a", encoding="utf-8")
        file_handler.setFormatter(MicrosecondFormatter(LEDGER_FORMAT, LOG_DATE_FORMAT))

        self._queue_handler = QueueHandler(self._queue)
        self._logger.addHandler(self._queue_handler)
        self._logger.setLevel(logging.INFO)
        self._logger.propagate = False

        self._listener = QueueListener(self._queue, file_handler)
        self._listener.start()

    def stop(self) -> None:
        """Flush pending lines and close the file."""
        if self._listener is not None:
            self._listener.stop()
            for handler in self._listener.handlers:
                handler.close()
            self._listener = None
        if self._queue_handler is not None:
            self._logger.removeHandler(self._queue_handler)
            self._queue_handler = None

    def record(self, profit: ProfitEstimate, tx_ids: tuple[str | None, ...] = ()) -> None:
        """Append one completed round trip."""
        if self._listener is None:
            self.start()
        self._logger.info(format_entry(profit, tx_ids))
        self._entries += 1

    @property
    def path(self) -> Path:
        """Ledger file location."""
        return self._path

    @property
    def entries(self) -> int:
        """Lines written by this instance."""
        return self._entries
