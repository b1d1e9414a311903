import json
import logging
from pathlib import Path
from typing import Literal

from helpdesk.core.config import get_settings

logger = logging.getLogger(__name__)

Theme = Literal["light", "dark"]
THEME_KEY = "theme"
DEFAULT_THEME: Theme = "light"


class PreferenceStorage:
    """Key/value preferences persisted as one JSON object on disk."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or get_settings().preferences_path

    def get(self, key: str) -> str | None:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def _read(self) -> dict[str, object]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable preferences file %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}


class AppState:
    """Theme and sidebar state for one application session.

    Only the theme is persisted. Once closed, the state rejects further changes.
    """

    def __init__(self, storage: PreferenceStorage, theme: Theme, sidebar_expanded: bool = True) -> None:
        self._storage = storage
        self._theme: Theme = theme
        self._sidebar_expanded = sidebar_expanded
        self._closed = False

    @classmethod
    def start(cls, storage: PreferenceStorage) -> "AppState":
        stored = storage.get(THEME_KEY)
        theme: Theme = stored if stored in ("light", "dark") else DEFAULT_THEME
        return cls(storage, theme)

    @property
    def theme(self) -> Theme:
        return self._theme

    @property
    def sidebar_expanded(self) -> bool:
        return self._sidebar_expanded

    @property
    def closed(self) -> bool:
        return self._closed

    def toggle_theme(self) -> Theme:
        self._ensure_open()
        self._theme = "dark" if self._theme == "light" else "light"
        self._storage.set(THEME_KEY, self._theme)
        return self._theme

    def toggle_sidebar(self) -> bool:
        self._ensure_open()
        self._sidebar_expanded = not self._sidebar_expanded
        return self._sidebar_expanded

    def close(self) -> None:
        self._closed = True

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("Application state is closed.")
