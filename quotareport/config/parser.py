"""YAML configuration loader."""
import yaml
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from .schema import ReportConfig
from ..quota.errors import ConfigError

DEFAULT_CONFIG_PATH = "quota-report.yaml"

STARTER_CONFIG = """\
# Azure quota report configuration
location: eastus
output: quota-report.html
# jsonOutput: quota-report.json
categories:
  - Compute
  - Storage
  - WebApp
# tenantName: Contoso
subscriptions:
  include: []
  exclude: []
"""


class ConfigParser:
    """Parser for YAML report configuration files."""

    @staticmethod
    def load(file_path: Optional[str] = None) -> ReportConfig:
        """Load and validate a YAML configuration file.

        A missing file at the default path yields the default configuration.

        Args:
            file_path: Path to the YAML file, or None for the default path.

        Returns:
            ReportConfig: Validated configuration.

        Raises:
            FileNotFoundError: If an explicitly given file doesn't exist.
            ConfigError: If the file is malformed or fails validation.
        """
        path = Path(file_path or DEFAULT_CONFIG_PATH)
        if not path.exists():
            if file_path is None:
                return ReportConfig()
            raise FileNotFoundError(f"Configuration file not found: {path}")

        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f)
            return ReportConfig.model_validate(data or {})
        except yaml.YAMLError as e:
            raise ConfigError(f"Malformed YAML in {path}: {e}") from e
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    @staticmethod
    def write_starter(file_path: str = DEFAULT_CONFIG_PATH, force: bool = False) -> Path:
        """Write a starter configuration file.

        Raises:
            FileExistsError: If the file exists and force is False.
        """
        path = Path(file_path)
        if path.exists() and not force:
            raise FileExistsError(f"Configuration file already exists: {path}")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(STARTER_CONFIG)
        return path
