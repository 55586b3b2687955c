"""Logging setup shared by the API and the scheduler worker."""
from __future__ import annotations

import logging.config
from pathlib import Path

import yaml

from branch_reports.core.config import get_settings

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "configs" / "logging.yaml"


def configure_logging(config_path: Path | None = None) -> None:
    """Apply the YAML ``dictConfig``, or a plain console setup when it is missing.

    ``LOG_CONFIG_PATH`` overrides the bundled file; ``LOG_LEVEL`` sets the
    level of the fallback configuration.
    """

    settings = get_settings()
    if config_path is None:
        config_path = Path(settings.log_config_path) if settings.log_config_path else DEFAULT_CONFIG_PATH
    if config_path.exists():
        with config_path.open("r", encoding="utf-8") as config_file:
            logging.config.dictConfig(yaml.safe_load(config_file))
        return
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger(__name__).warning("logging config not found", extra={"path": str(config_path)})


__all__ = ["DEFAULT_CONFIG_PATH", "configure_logging"]
