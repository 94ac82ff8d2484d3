from __future__ import annotations
from pathlib import Path
import fcntl
from typing import Any, Dict
import yaml

from kozeki.configuration.moderation_settings import ModerationSettings
from kozeki.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path("./config/app_config.yml").resolve()

DEFAULT_COMMAND_KEYWORDS: Dict[str, str] = {
    "mute": "km",
    "unmute": "kum",
    "ban": "kb",
    "unban": "kub",
    "info": "ki",
}

DEFAULT_PRESENCE_ACTIVITY = "for km / kb commands"


class AppConfig:
    """File-lock based accessor around the YAML-based application configuration.

    The class caches contents of ``./config/app_config.yml``, exposes dictionary-like
    access helpers, and resolves moderation settings through :class:`ModerationSettings`.
    Uses fcntl file locks for safe concurrent access across processes.
    """

    def __init__(self, config_path: Path) -> None:
        self.config_path = config_path
        self._data: Dict[str, Any] = {}
        self.reload()

    # --------------------------
    # Private helpers
    # --------------------------
    def load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                data = yaml.safe_load(f)
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
                if not isinstance(data, dict):
                    logger.warning("[APP CONFIGURATION] Config file %s is not a mapping; ignoring it.", self.config_path)
                    return {}
                return data
        except FileNotFoundError:
            logger.error("[APP CONFIGURATION] Config file %s not found.", self.config_path)
        except Exception as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
        return {}

    # --------------------------
    # Public API
    # --------------------------
    def reload(self) -> Dict[str, Any]:
        """Reload configuration from disk and return the loaded mapping.

        Returns the raw mapping that was loaded (an empty dict on error).
        """
        self._data = self.load_from_disk()
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        """Return the current cached configuration mapping.

        The returned dict is the internal cache; callers should not mutate it.
        """
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Safe lookup for top-level configuration keys."""
        return self._data.get(key, default)

    # --------------------------
    # High-level shortcuts
    # --------------------------
    @property
    def command_keywords(self) -> Dict[str, str]:
        """Return the chat keyword for each command, keyed by action name.

        Keywords are lower-cased; blank or non-string overrides keep the default.
        """
        keywords = dict(DEFAULT_COMMAND_KEYWORDS)
        overrides = self._data.get("commands", {})
        if isinstance(overrides, dict):
            for action_name, keyword in overrides.items():
                if action_name in keywords and isinstance(keyword, str) and keyword.strip():
                    keywords[action_name] = keyword.strip().lower()
        return keywords

    @property
    def moderation(self) -> ModerationSettings:
        """Return the moderation settings wrapped in a ModerationSettings helper."""
        settings = self._data.get("moderation", {})
        if not isinstance(settings, dict):
            settings = {}
        return ModerationSettings(settings)

    @property
    def presence_activity(self) -> str:
        """Return the text shown in the bot's "Watching ..." presence."""
        presence = self._data.get("presence", {})
        if isinstance(presence, dict) and presence.get("activity"):
            return str(presence["activity"])
        return DEFAULT_PRESENCE_ACTIVITY


# Shared application-wide configuration instance
app_config = AppConfig(CONFIG_PATH)
