"""
Application settings management.

Persists the ignore-directory list, editor preferences and the list of
recent comparisons as JSON.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Callable, Optional


RECENT_COMPARISONS_LIMIT = 10

DEFAULT_IGNORE_DIRS = [
    '.git', 'node_modules', '__pycache__', 'venv', '.venv', 'target',
    '.DS_Store', '.idea', '.vscode', 'dist', 'build', '.next', '.nuxt',
    'coverage', '.tox', '.mypy_cache', '.pytest_cache', '.cargo',
    '.terraform', 'vendor',
]


@dataclass
class EditorPreferences:
    """Diff editor display preferences."""
    minimap_enabled: bool = False
    show_full_content: bool = False
    sidebar_width: int = 280


@dataclass(frozen=True)
class RecentComparison:
    """A previously compared pair of directories."""
    left_dir: str
    right_dir: str


@dataclass
class AppConfig:
    """Main application settings container."""
    ignore_dirs: list[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_DIRS))
    editor_preferences: EditorPreferences = field(default_factory=EditorPreferences)
    recent_comparisons: list[RecentComparison] = field(default_factory=list)


class SettingsManager:
    """Manager for loading/saving application settings."""

    def __init__(self, settings_path: Optional[Path] = None):
        self.settings_path = Path(settings_path) if settings_path else self._get_default_path()
        self._settings: Optional[AppConfig] = None
        self._observers: list[Callable[[AppConfig], None]] = []
        self.dirty = False

    @staticmethod
    def _get_default_path() -> Path:
        """Get the default settings file path."""
        if os.name == 'nt':
            app_data = os.environ.get('APPDATA', os.path.expanduser('~'))
            return Path(app_data) / 'Diverge' / 'settings.json'
        config_home = os.environ.get('XDG_CONFIG_HOME',
                                     os.path.expanduser('~/.config'))
        return Path(config_home) / 'diverge' / 'settings.json'

    @property
    def settings(self) -> AppConfig:
        """Get current settings, loading from disk if needed."""
        if self._settings is None:
            self._settings = self.load()
        return self._settings

    def load(self) -> AppConfig:
        """Load settings from disk, falling back to defaults."""
        if not self.settings_path.exists():
            return AppConfig()

        try:
            with open(self.settings_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return self._from_dict(data)
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logging.warning(f"SettingsManager - Could not read {self.settings_path}: {e}")
            return AppConfig()

    def save(self, settings: Optional[AppConfig] = None) -> bool:
        """Save settings to disk."""
        settings = settings or self._settings
        if settings is None:
            return False

        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.settings_path, 'w', encoding='utf-8') as f:
                json.dump(self._to_dict(settings), f, indent=2)
        except OSError as e:
            logging.error(f"SettingsManager - Failed to save {self.settings_path}: {e}")
            return False

        self._settings = settings
        self.dirty = False
        self._notify_observers()
        return True

    def reset(self) -> AppConfig:
        """Reset to default settings."""
        self._settings = AppConfig()
        self.save()
        return self._settings

    def add_observer(self, callback: Callable[[AppConfig], None]) -> None:
        """Add a callback to be notified of settings changes."""
        self._observers.append(callback)

    def remove_observer(self, callback: Callable[[AppConfig], None]) -> None:
        """Remove a settings change observer."""
        if callback in self._observers:
            self._observers.remove(callback)

    def _notify_observers(self) -> None:
        for callback in self._observers:
            try:
                callback(self._settings)
            except Exception as e:
                logging.error(f"SettingsManager - Observer {callback!r} failed: {e}")

    # -------------------------------------------------------------------------
    # Ignore list
    # -------------------------------------------------------------------------

    def add_ignore_dir(self, name: str) -> bool:
        """Add a directory name to the ignore list. Saved on `save()`."""
        name = name.strip()
        ignore_dirs = self.settings.ignore_dirs
        if not name or name in ignore_dirs:
            return False
        ignore_dirs.append(name)
        self.dirty = True
        return True

    def remove_ignore_dir(self, name: str) -> bool:
        ignore_dirs = self.settings.ignore_dirs
        if name not in ignore_dirs:
            return False
        ignore_dirs.remove(name)
        self.dirty = True
        return True

    def edit_ignore_dir(self, old: str, new: str) -> bool:
        """Rename an ignore entry in place, keeping its position."""
        new = new.strip()
        ignore_dirs = self.settings.ignore_dirs
        if not new or new == old or new in ignore_dirs or old not in ignore_dirs:
            return False
        ignore_dirs[ignore_dirs.index(old)] = new
        self.dirty = True
        return True

    # -------------------------------------------------------------------------
    # Editor preferences and recent comparisons (saved immediately)
    # -------------------------------------------------------------------------

    def update_editor_preferences(self, **changes: Any) -> EditorPreferences:
        prefs = self.settings.editor_preferences
        for name, value in changes.items():
            if not hasattr(prefs, name):
                raise AttributeError(f"Unknown editor preference: {name}")
            setattr(prefs, name, value)
        self.save()
        return prefs

    def add_recent_comparison(self, left_dir: str, right_dir: str) -> None:
        """Move the pair to the front of the recent list, capped in length."""
        entry = RecentComparison(left_dir, right_dir)
        recent = [r for r in self.settings.recent_comparisons if r != entry]
        recent.insert(0, entry)
        self.settings.recent_comparisons = recent[:RECENT_COMPARISONS_LIMIT]
        self.save()

    def remove_recent_comparison(self, left_dir: str, right_dir: str) -> None:
        entry = RecentComparison(left_dir, right_dir)
        self.settings.recent_comparisons = [
            r for r in self.settings.recent_comparisons if r != entry
        ]
        self.save()

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def _to_dict(self, settings: AppConfig) -> dict:
        """Convert settings to dictionary for JSON serialization."""
        return asdict(settings)

    def _from_dict(self, data: dict) -> AppConfig:
        """Convert dictionary back to settings objects."""
        defaults = EditorPreferences()
        prefs = data.get('editor_preferences') or {}
        editor_preferences = EditorPreferences(
            minimap_enabled=prefs.get('minimap_enabled', defaults.minimap_enabled),
            show_full_content=prefs.get('show_full_content', defaults.show_full_content),
            sidebar_width=prefs.get('sidebar_width', defaults.sidebar_width),
        )

        recent = [
            RecentComparison(r['left_dir'], r['right_dir'])
            for r in data.get('recent_comparisons') or []
            if 'left_dir' in r and 'right_dir' in r
        ]

        return AppConfig(
            ignore_dirs=list(data.get('ignore_dirs', DEFAULT_IGNORE_DIRS)),
            editor_preferences=editor_preferences,
            recent_comparisons=recent[:RECENT_COMPARISONS_LIMIT],
        )
