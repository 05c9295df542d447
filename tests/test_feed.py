import logging

import pytest

from conftest import CANONICAL_HEX, CREATED_AT, EXPIRY_AT, PRICE
from oracle_datum.config import FeedSettings
from oracle_datum.feed import OracleFeed, format_timestamp
from oracle_datum.lib.datums import OracleDatum, SharedData, create_oracle_datum
from oracle_datum.lib.exceptions import DatumDecodeError, InvalidVariant


@pytest.fixture
def feed(canonical_datum):
    return OracleFeed(canonical_datum)


def test_format_timestamp():
    assert format_timestamp(0) == "1970-01-01 00:00:00"
    assert format_timestamp(CREATED_AT) == "2024-02-05 22:35:54"
    assert format_timestamp(EXPIRY_AT) == "2024-02-05 23:35:54"


def test_from_cbor(canonical_datum):
    feed = OracleFeed.from_cbor(CANONICAL_HEX)
    assert feed.datum == canonical_datum
    assert feed.settings == FeedSettings()


def test_from_cbor_rejects_garbage():
    with pytest.raises(DatumDecodeError):
        OracleFeed.from_cbor("d87a80")


def test_feed_fields(feed):
    assert feed.get_price() == PRICE
    assert feed.get_created_at() == CREATED_AT
    assert feed.get_expiry_at() == EXPIRY_AT


def test_exchange_rate(feed):
    assert feed.exchange_rate() == pytest.approx(0.49085)


def test_quote_and_base_amounts(feed):
    assert feed.quote_amount(1000000) == PRICE
    assert feed.base_amount(PRICE) == 1000000
    assert feed.base_amount(100) == 203
    assert feed.quote_amount(0) == 0


def test_custom_precision():
    feed = OracleFeed(create_oracle_datum(250, 0, 0), FeedSettings(precision=100))
    assert feed.exchange_rate() == 2.5
    assert feed.quote_amount(4) == 10
    assert feed.base_amount(10) == 4


@pytest.mark.parametrize("price", [0, -1])
def test_base_amount_requires_positive_price(price):
    feed = OracleFeed(create_oracle_datum(price, 0, 0))
    with pytest.raises(ValueError):
        feed.base_amount(10)


def test_is_valid(feed):
    assert feed.is_valid(EXPIRY_AT) is True
    assert feed.is_valid(EXPIRY_AT + 1) is False


def test_stale_feed_is_logged(feed, caplog):
    with caplog.at_level(logging.WARNING, logger="Oracle-Feed"):
        feed.is_valid(EXPIRY_AT + 1)
    assert "Oracle feed ADA/USD expired at 2024-02-05 23:35:54" in caplog.text


def test_payloadless_feed_fails_loudly():
    feed = OracleFeed(OracleDatum(SharedData()))
    with pytest.raises(InvalidVariant):
        feed.get_price()
    with pytest.raises(InvalidVariant):
        feed.is_valid(0)
    with pytest.raises(InvalidVariant):
        feed.summary()


def test_summary(feed):
    assert feed.summary() == (
        "Last Price: 0.490850 ADA/USD "
        "(created 2024-02-05 22:35:54, expires 2024-02-05 23:35:54)"
    )


def test_pair():
    feed = OracleFeed(
        create_oracle_datum(1, 0, 0),
        FeedSettings(base_asset="tADA", quote_asset="tUSDT"),
    )
    assert feed.pair == "tADA/tUSDT"
