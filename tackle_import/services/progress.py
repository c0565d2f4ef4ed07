from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display over paste sources with tqdm (TTY only).

In non-TTY environments (CI, pipes) no bar is created so output carries no
ANSI control sequences.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """One bar across all paste sources of a run."""

    def __init__(self, total_sources: int, *, description: str = "Processing pastes") -> None:
        self.total_sources = total_sources
        self.description = description
        self.current = 0

        self.enabled = is_tty_enabled() and total_sources > 1
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_sources,
                desc=description,
                unit="paste",
                leave=True,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def start(self, source_name: str) -> None:
        self.current += 1
        if self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({source_name})")

    def finish(self, **postfix: Any) -> None:
        if self.pbar is not None:
            if postfix:
                self.pbar.set_postfix(**postfix)
            self.pbar.update(1)
            self.pbar.set_description(self.description)

    def write(self, text: str) -> None:
        """Print without breaking the bar."""
        if self.pbar is not None:
            tqdm.write(text)
        else:
            print(text)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
