import logging

import pytest

from oracle_datum.lib.datums import GenericData, OracleDatum, PriceMap

PRICE = 490850
CREATED_AT = 1707172554600
EXPIRY_AT = 1707176154600

CANONICAL_HEX = (
    "d8799fd87b9fa3001a00077d62011b0000018d7b69e768021b0000018d7ba0d5e8ffff"
)


@pytest.fixture
def canonical_datum():
    """Datum published by the ADA/USD feed, canonical key order"""
    return OracleDatum(
        GenericData(
            PriceMap(((0, PRICE), (1, CREATED_AT), (2, EXPIRY_AT)))
        )
    )


@pytest.fixture
def reordered_datum():
    """Same feed values with the timestamp entry first"""
    return OracleDatum(
        GenericData(
            PriceMap(((1, CREATED_AT), (0, PRICE), (2, EXPIRY_AT)))
        )
    )


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "feed:\n"
        "  precision: 1000000\n"
        "  base_asset: ADA\n"
        "  quote_asset: USDT\n"
        "  log_level: DEBUG\n",
        encoding="UTF-8",
    )
    return path


@pytest.fixture
def root_logger():
    """Root logger, restored after the test touches its handlers or level"""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
