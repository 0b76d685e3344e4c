"""Load correlator configuration from YAML files."""

import asyncio
import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from trx_correlate.models.config import CorrelatorConfig

log = logging.getLogger(__name__)

CONFIG_FILE_NAMES = (".trx-correlate.yaml", ".trx-correlate.yml")


def find_config_file(project_root: Path) -> Path | None:
    """Return the first config file present in the project root."""
    for name in CONFIG_FILE_NAMES:
        candidate = project_root / name
        if candidate.is_file():
            return candidate
    return None


async def load_config(config_path: Path) -> CorrelatorConfig:
    """Load and validate a configuration file.

    Args:
        config_path: Path to a YAML configuration file

    Returns:
        Validated configuration. An empty file yields the defaults.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid YAML or fails validation

    """
    if not config_path.is_file():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    content = await asyncio.to_thread(config_path.read_text, encoding="utf-8")

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        log.info("Config file %s is empty, using defaults", config_path)
        return CorrelatorConfig()

    if not isinstance(data, dict):
        raise ValueError(f"Invalid config schema in {config_path}: expected a mapping")

    try:
        return CorrelatorConfig.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid config schema in {config_path}: {e}") from e
