"""
Progress and failure tracking for replicated model comparison.

:meth:`~zihurdle.model._Study.replicate` records every replicate, fitted or
failed, on a :class:`ReplicateTracker`. The tracker owns the failure
count the run reports and forwards ``(done, total, n_failed)`` to an
optional callback whenever the completed percentage moves on.
"""

import sys
from typing import Callable, Dict, Optional

ProgressCallback = Callable[[int, int, int], None]


class SimulationCancelled(Exception):
    """Raised from a progress callback to stop a replicated run."""


class ReplicateTracker:
    """Counts finished and failed replicates and throttles the callback.

    The callback fires on :meth:`start`, whenever the integer percentage
    of finished replicates changes (or every *update_every* replicates,
    when given), and on the last replicate.

    Args:
        total: Number of replicates in the run.
        callback: Optional ``callback(done, total, n_failed)``.
        update_every: Fixed reporting interval in replicates.
    """

    def __init__(
        self,
        total: int,
        callback: Optional[ProgressCallback] = None,
        update_every: Optional[int] = None,
    ):
        self.total = total
        self.update_every = update_every
        self._callback = callback
        self.n_done = 0
        self.n_failed = 0
        self.failure_reasons: Dict[str, int] = {}
        self._last_percent = -1

    @property
    def n_succeeded(self) -> int:
        return self.n_done - self.n_failed

    @property
    def failure_rate(self) -> float:
        return self.n_failed / self.n_done if self.n_done else 0.0

    def start(self):
        self.n_done = self.n_failed = 0
        self.failure_reasons = {}
        self._last_percent = 0
        self._notify()

    def record(self, failure: Optional[str] = None):
        """Record one finished replicate; *failure* names the error type if it failed."""
        self.n_done += 1
        if failure is not None:
            self.n_failed += 1
            self.failure_reasons[failure] = self.failure_reasons.get(failure, 0) + 1

        if self._due():
            self._notify()

    def _due(self) -> bool:
        if self.n_done >= self.total:
            return True
        if self.update_every is not None:
            return self.n_done % self.update_every == 0
        percent = 100 * self.n_done // self.total
        if percent != self._last_percent:
            self._last_percent = percent
            return True
        return False

    def _notify(self):
        if self._callback is not None:
            self._callback(self.n_done, self.total, self.n_failed)


class PrintReporter:
    """Console callback: ``\\rReplicate 45/100 (45%), 2 failed``."""

    def __init__(self, stream=None):
        self._stream = stream

    def __call__(self, done: int, total: int, n_failed: int):
        if total <= 0:
            return
        stream = self._stream if self._stream is not None else sys.stderr
        line = f"\rReplicate {done}/{total} ({100 * done // total}%)"
        if n_failed:
            line += f", {n_failed} failed"
        stream.write(line)
        if done >= total:
            stream.write("\n")
        stream.flush()


class TqdmReporter:
    """tqdm bar with the failure count as postfix (``pip install zihurdle[progress]``).

    Usage::

        study.replicate(200, progress_callback=TqdmReporter())
    """

    def __init__(self, **tqdm_kwargs):
        self._tqdm_kwargs = {"desc": "Replicates", "unit": "replicate", **tqdm_kwargs}
        self._bar = None

    def __call__(self, done: int, total: int, n_failed: int):
        from tqdm import tqdm

        if self._bar is None:
            self._bar = tqdm(total=total, **self._tqdm_kwargs)

        if done > self._bar.n:
            self._bar.set_postfix(failed=n_failed, refresh=False)
            self._bar.update(done - self._bar.n)

        if done >= total:
            self._bar.close()
            self._bar = None
