# perevod/config/settings.py
"""
Application settings management for Perevod.

Settings are split into two files:
- settings.template.json: developer defaults, replaced on update
- user_settings.json: only the keys a user changed (USER_SETTINGS_KEYS)

load() reads the template first and then applies the user overrides.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

# Module logger
logger = logging.getLogger(__name__)

# Keys persisted to user_settings.json
USER_SETTINGS_KEYS = {
    "relay_url",
    "output_directory",
    "request_timeout",
}

DEFAULT_RELAY_URL = "http://localhost:3000/api/translate"
DEFAULT_UPSTREAM_URL = "https://translate.api.cloud.yandex.net/translate/v2/translate"


@dataclass
class AppSettings:
    """Application settings"""

    # Remote translation (client side)
    relay_url: str = DEFAULT_RELAY_URL
    request_timeout: int = 30           # Seconds per relay/provider request

    # Relay (server side)
    upstream_url: str = DEFAULT_UPSTREAM_URL
    target_language: str = "ru"
    relay_host: str = "127.0.0.1"
    relay_port: int = 3000

    # Output (None = same directory as input)
    output_directory: Optional[str] = None

    @classmethod
    def load(cls, path: Path) -> "AppSettings":
        """Load settings from template and user settings files.

        Args:
            path: Settings path (config/settings.json). Only its directory is
                  used to locate settings.template.json and user_settings.json.
        """
        config_dir = path.parent
        template_path = config_dir / "settings.template.json"
        user_settings_path = config_dir / "user_settings.json"

        data = {}

        # 1. Developer defaults
        if template_path.exists():
            try:
                with open(template_path, 'r', encoding='utf-8-sig') as f:
                    data = json.load(f)
                    logger.debug("Loaded template settings from: %s", template_path)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                logger.warning("Failed to load template settings: %s", e)

        # 2. User overrides
        if user_settings_path.exists():
            try:
                with open(user_settings_path, 'r', encoding='utf-8-sig') as f:
                    user_data = json.load(f)
                    for key in USER_SETTINGS_KEYS:
                        if key in user_data:
                            data[key] = user_data[key]
                    logger.debug("Loaded user settings from: %s", user_settings_path)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                logger.warning("Failed to load user settings: %s", e)

        # Filter to only known fields
        known_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered_data = {k: v for k, v in data.items() if k in known_fields}

        settings = cls(**filtered_data)
        settings._validate()
        return settings

    def _validate(self) -> None:
        """Reset out-of-range values to defaults with a warning."""
        if not self.relay_url:
            logger.warning("relay_url is empty, resetting to %s", DEFAULT_RELAY_URL)
            self.relay_url = DEFAULT_RELAY_URL

        if not self.upstream_url:
            logger.warning("upstream_url is empty, resetting to %s", DEFAULT_UPSTREAM_URL)
            self.upstream_url = DEFAULT_UPSTREAM_URL

        if self.request_timeout < 5:
            logger.warning("request_timeout too small (%d), resetting to 30", self.request_timeout)
            self.request_timeout = 30
        elif self.request_timeout > 300:
            logger.warning("request_timeout too large (%d), resetting to 30", self.request_timeout)
            self.request_timeout = 30

        if not 0 < self.relay_port < 65536:
            logger.warning("relay_port out of range (%d), resetting to 3000", self.relay_port)
            self.relay_port = 3000

    def save(self, path: Path) -> None:
        """Save user-changeable settings to user_settings.json.

        settings.template.json is never modified.

        Args:
            path: Settings path (config/settings.json)
        """
        config_dir = path.parent
        user_settings_path = config_dir / "user_settings.json"

        config_dir.mkdir(parents=True, exist_ok=True)

        data = {key: getattr(self, key) for key in sorted(USER_SETTINGS_KEYS)}

        with open(user_settings_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        logger.debug("Saved user settings to: %s", user_settings_path)

    def get_output_directory(self, input_path: Path) -> Path:
        """
        Get output directory for translated file.
        Returns input file's directory if output_directory is None.
        """
        if self.output_directory:
            return Path(self.output_directory)
        return input_path.parent


def get_default_settings_path() -> Path:
    """Get default settings file path"""
    return Path(__file__).parent.parent.parent / "config" / "settings.json"
