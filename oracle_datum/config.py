"""Feed configuration loaded from YAML"""

from dataclasses import dataclass

import yaml

from .utils.logging_config import logging, setup_logging

logger = logging.getLogger("Oracle-Config")

# Oracle prices are published with six decimal places
COIN_PRECISION = 1000000


@dataclass(frozen=True)
class FeedSettings:
    """Settings for reading an oracle feed

    Attributes:
        precision: Scale of the integer price published in the datum
        base_asset: Asset the price is quoted for
        quote_asset: Asset the price is expressed in
        log_level: Level handed to setup_logging
    """

    precision: int = COIN_PRECISION
    base_asset: str = "ADA"
    quote_asset: str = "USD"
    log_level: str = "INFO"


def load_config(path="config.yaml"):
    """Loads the YAML configuration file."""
    try:
        with open(path, "r", encoding="UTF-8") as config_yaml:
            return yaml.load(config_yaml, Loader=yaml.FullLoader) or {}
    except FileNotFoundError:
        logger.error("Configuration file %s not found.", path)
        raise


def validate_config(config, section, required_keys):
    """Validates that all required keys exist for a configuration section."""
    if section not in config or not all(
        key in (config[section] or {}) for key in required_keys
    ):
        raise ValueError(f"Configuration for {section} not found or is incomplete.")


def load_feed_settings(path="config.yaml", section="feed") -> FeedSettings:
    """Read the feed section of the configuration file and apply its log level"""
    configyaml = load_config(path)
    validate_config(configyaml, section, ["precision"])
    feed = configyaml[section]

    precision = feed["precision"]
    if isinstance(precision, bool) or not isinstance(precision, int) or precision <= 0:
        raise ValueError(f"precision must be a positive integer, got {precision!r}")

    defaults = FeedSettings()
    settings = FeedSettings(
        precision=precision,
        base_asset=str(feed.get("base_asset", defaults.base_asset)),
        quote_asset=str(feed.get("quote_asset", defaults.quote_asset)),
        log_level=str(feed.get("log_level", defaults.log_level)),
    )
    setup_logging(settings.log_level)
    return settings
