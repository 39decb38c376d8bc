"""TOML-based configuration provider.

Config loading priority (highest to lowest):
1. An explicit file passed on the command line
2. Global: ~/.config/pinlock/config.toml (user defaults)
3. Built-in defaults
"""

import logging
from pathlib import Path

from pinlock.domain.config import PinlockConfig
from pinlock.shared.config_io import get_global_config_path, load_config_data

logger = logging.getLogger(__name__)


class TomlConfigProvider:
    """Configuration provider that loads from TOML files.

    Missing files fall back to defaults silently; invalid files fall back to
    defaults with a warning.
    """

    def load(self, path: Path | None = None) -> PinlockConfig:
        """Load configuration.

        Args:
            path: Config file to read instead of the global one.

        Returns:
            PinlockConfig merged over the built-in defaults.
        """
        config_path = path if path is not None else get_global_config_path()
        config = PinlockConfig.default()

        if not config_path.exists():
            if path is not None:
                logger.warning("Config file %s not found. Using defaults.", config_path)
            return config

        try:
            data = load_config_data(config_path)
            config = PinlockConfig.from_partial(config, data)
            logger.debug("Loaded config from %s", config_path)
        except (FileNotFoundError, ValueError) as e:
            logger.warning(
                "Failed to parse config at %s: %s. Using default configuration.",
                config_path,
                e,
            )
            return PinlockConfig.default()
        return config
