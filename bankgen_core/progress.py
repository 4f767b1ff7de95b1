"""
Phase-scoped progress display.

One tqdm bar per phase, updated with the cumulative number of records
written. Rendering problems are logged and never reach the pipeline.
"""

import sys
from typing import Dict, Optional

from tqdm import tqdm

from .logger_utils import get_logger

logger = get_logger(__name__)


class ProgressReporter:
    """Progress bars keyed by phase name."""

    def __init__(self, enabled: bool = True, stream=None):
        self.enabled = enabled
        self.stream = stream or sys.stdout
        self._bars: Dict[str, tqdm] = {}
        self.completed: Dict[str, int] = {}

    def start(self, phase: str, total: Optional[int] = None) -> None:
        """Open the bar for a phase; ``total`` may be unknown (None)."""
        try:
            if phase in self._bars:
                self._bars[phase].close()
            self._bars[phase] = tqdm(
                total=total,
                desc=phase.capitalize(),
                unit="rows",
                unit_scale=True,
                position=len(self._bars),
                leave=True,
                dynamic_ncols=True,
                file=self.stream,
                disable=not self.enabled,
            )
            self.completed[phase] = 0
        except Exception as e:
            logger.warning(f"Progress display unavailable for {phase}: {e}")

    def update(self, phase: str, completed: int) -> None:
        """Set the phase's counter to ``completed`` (cumulative)."""
        self.completed[phase] = completed
        try:
            bar = self._bars.get(phase)
            if bar is None:
                return
            delta = completed - bar.n
            if delta > 0:
                bar.update(delta)
        except Exception as e:
            logger.warning(f"Progress update failed for {phase}: {e}")

    def close(self) -> None:
        for phase, bar in list(self._bars.items()):
            try:
                bar.close()
            except Exception as e:
                logger.warning(f"Could not close progress bar for {phase}: {e}")
        self._bars.clear()
