"""Managers for persisted application settings."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from constants import CURRENT_PAGE_URL_KEY, HAVE_DOWNLOADED_ALL_PAGES_KEY
from errors import StoreWriteFailedError
from models import ResumeState

logger = logging.getLogger(__name__)


class SettingsManager:
    """
    Small key-value settings file holding the catalog resume state.

    Every change is written immediately so the download can resume after
    the application is restarted. Without a path, settings are kept in memory.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else None
        self._values: Dict[str, Any] = {}
        self._load()

    def _load(self) -> None:
        """Load settings from disk, falling back to defaults."""
        if self.path is None or not os.path.exists(self.path):
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                values = json.load(f)
            if not isinstance(values, dict):
                raise ValueError("settings file does not hold an object")
            self._values = values
        except (OSError, ValueError) as e:
            logger.warning(f"Error loading settings from {self.path}, using defaults: {e}")
            self._values = {}

    def _save(self, values: Dict[str, Any]) -> None:
        """Write values to disk; they replace the current ones only if the write succeeds."""
        if self.path is not None:
            tmp_path = self.path.with_name(self.path.name + ".tmp")
            try:
                with open(tmp_path, "w", encoding="utf-8") as f:
                    json.dump(values, f, indent=2)
                os.replace(tmp_path, self.path)
            except OSError as e:
                raise StoreWriteFailedError(f"cannot save settings: {e}", url=str(self.path)) from e
        self._values = values

    @property
    def current_page_url(self) -> Optional[str]:
        value = self._values.get(CURRENT_PAGE_URL_KEY)
        return value if isinstance(value, str) else None

    @property
    def have_downloaded_all_pages(self) -> bool:
        return self._values.get(HAVE_DOWNLOADED_ALL_PAGES_KEY) is True

    def resume_state(self) -> ResumeState:
        return ResumeState(
            next_page_url=self.current_page_url,
            all_pages_downloaded=self.have_downloaded_all_pages,
        )

    def set_current_page_url(self, url: str) -> None:
        """Record the next catalog page to download."""
        values = dict(self._values)
        values[CURRENT_PAGE_URL_KEY] = url
        self._save(values)

    def mark_all_pages_downloaded(self) -> None:
        values = dict(self._values)
        values[HAVE_DOWNLOADED_ALL_PAGES_KEY] = True
        values.pop(CURRENT_PAGE_URL_KEY, None)
        self._save(values)

    def restore(self, state: ResumeState) -> None:
        """Write back a previously read resume state."""
        values = dict(self._values)
        values[HAVE_DOWNLOADED_ALL_PAGES_KEY] = state.all_pages_downloaded
        if state.next_page_url is None:
            values.pop(CURRENT_PAGE_URL_KEY, None)
        else:
            values[CURRENT_PAGE_URL_KEY] = state.next_page_url
        self._save(values)

    def reset(self) -> None:
        """Forget all catalog progress."""
        self.restore(ResumeState())
