"""Configuration loader with validation and error handling."""

import yaml
import logging
from pathlib import Path
from typing import Optional, Dict, Any
from pydantic import ValidationError

from .models import SystemConfig

logger = logging.getLogger(__name__)


class ConfigLoadError(Exception):
    """Base exception for configuration loading errors."""
    pass


class ConfigValidationError(ConfigLoadError):
    """Configuration validation failed."""

    def __init__(self, errors: list[dict], file_path: Path):
        self.errors = errors
        self.file_path = file_path
        super().__init__(self._format_errors())

    def _format_errors(self) -> str:
        """Format validation errors for user display."""
        lines = [f"Configuration validation failed for {self.file_path}:\n"]
        for error in self.errors:
            loc = " → ".join(str(l) for l in error['loc'])
            msg = error['msg']
            lines.append(f"  • {loc}: {msg}")
        return "\n".join(lines)


class ConfigLoader:
    """Loads and validates configuration files."""

    def __init__(self, config_dir: Path = Path(".")):
        self.config_dir = Path(config_dir)

    def load_yaml(self, file_path: Path) -> Dict[str, Any]:
        """Load YAML file with error handling."""
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
                if data is None:
                    return {}
                if not isinstance(data, dict):
                    raise ConfigLoadError(f"Expected a mapping at the top of {file_path}")
                return data
        except FileNotFoundError:
            raise ConfigLoadError(f"Configuration file not found: {file_path}")
        except yaml.YAMLError as e:
            raise ConfigLoadError(f"Invalid YAML in {file_path}: {e}")

    def load_system_config(self, file_path: Optional[Path] = None) -> SystemConfig:
        """
        Load system configuration.

        Falls back to defaults if file not found.
        """
        if file_path is None:
            file_path = self.config_dir / "config" / "system.yaml"

        try:
            if not file_path.exists():
                logger.info(f"System config not found at {file_path}, using defaults")
                return SystemConfig()

            data = self.load_yaml(file_path)
            config = SystemConfig(**data)
            logger.info(f"Loaded system config from {file_path}")
            return config

        except ValidationError as e:
            raise ConfigValidationError(e.errors(), file_path)
