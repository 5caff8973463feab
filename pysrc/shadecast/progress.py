"""
Progress reporting for raster builds.

Chunk completions are pushed to a host feedback object
(``set_progress(percent)``, ``push_info(message)``) when one is given,
otherwise to a tqdm bar on the terminal.

Usage:
    progress = ProgressReporter(total=len(chunks), desc="Shadow raster")
    for future in as_completed(futures):
        progress.update(1)
    progress.close()
"""

from __future__ import annotations

from typing import Any

from tqdm import tqdm


class ProgressReporter:
    """
    Progress over a known number of steps.

    Args:
        total: Number of steps; percentages are ``current / total``.
        desc: Label for the bar, announced once to a host feedback object.
        feedback: Optional host feedback object. When given, no terminal
            bar is drawn.
        disable: Count steps but report nothing.
    """

    def __init__(
        self,
        total: int,
        desc: str = "",
        feedback: Any = None,
        disable: bool = False,
    ):
        self.total = total
        self.desc = desc
        self.current = 0
        self.disable = disable
        self._closed = False

        self._feedback = None
        self._bar = None

        if disable:
            return

        if feedback is not None:
            self._feedback = feedback
            if self.desc:
                self._feedback.push_info(f"Starting: {self.desc}")
        else:
            self._bar = tqdm(total=total, desc=desc)

    def update(self, n: int = 1) -> None:
        """Advance by ``n`` steps; ignored once closed."""
        if self._closed:
            return

        self.current += n

        if self._feedback is not None:
            percent = min(100, int(100 * self.current / self.total)) if self.total > 0 else 0
            self._feedback.set_progress(percent)
        elif self._bar is not None:
            self._bar.update(n)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._bar is not None:
            self._bar.close()
