"""Progress bar for scanning candidate images using tqdm."""
from __future__ import annotations

from typing import Any

from tqdm import tqdm


class ProgressBar:
    """
    Progress bar over candidate images.

    Tracks how many candidates were scanned and how many were skipped
    (missing, duplicate version or out of range).
    """

    def __init__(self, total: int, enabled: bool = True):
        """
        Initialize progress bar.

        Args:
            total: Total number of candidates
            enabled: Whether to display progress
        """
        self.enabled = enabled
        self.scanned = 0
        self.skipped = 0

        if self.enabled:
            self._pbar = tqdm(
                total=total,
                unit="image",
                ncols=100,
                bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}] {postfix}",
                leave=True,
                dynamic_ncols=True,
            )
            self._update_postfix()
        else:
            self._pbar = None

    def _update_postfix(self) -> None:
        """Update progress bar postfix with statistics."""
        if self._pbar is not None:
            self._pbar.set_postfix_str(
                f"[scanned {self.scanned} skipped {self.skipped}]",
                refresh=True
            )

    def update(self, scanned: bool = True) -> None:
        """
        Update progress by one candidate.

        Args:
            scanned: Whether the candidate was scanned (False if skipped)
        """
        if scanned:
            self.scanned += 1
        else:
            self.skipped += 1

        if self._pbar is not None:
            self._pbar.update(1)
            self._update_postfix()

    def finish(self) -> None:
        """Ensure progress bar is closed."""
        if self._pbar is not None:
            self._pbar.close()

    def __enter__(self) -> ProgressBar:
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.finish()
