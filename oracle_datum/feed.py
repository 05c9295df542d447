"""Oracle Feed"""

from datetime import datetime, timezone
from typing import Optional, Union

from .config import FeedSettings
from .lib.datums import (
    OracleDatum,
    get_oracle_created_at,
    get_oracle_expiry_at,
    get_oracle_price,
    is_oracle_valid,
)
from .utils.logging_config import logging

logger = logging.getLogger("Oracle-Feed")


def format_timestamp(timestamp: int) -> str:
    """Convert POSIX milliseconds to human UTC time"""
    return datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc).strftime(
        "%Y-%m-%d %H:%M:%S"
    )


class OracleFeed:
    """Read-only view over a published oracle datum

    Attributes:
        datum: The decoded oracle datum
        settings: Precision and asset pair of the feed
    """

    def __init__(
        self,
        datum: OracleDatum,
        settings: Optional[FeedSettings] = None,
    ) -> None:
        self.datum = datum
        self.settings = settings if settings is not None else FeedSettings()

    @classmethod
    def from_cbor(
        cls,
        payload: Union[bytes, bytearray, str],
        settings: Optional[FeedSettings] = None,
    ) -> "OracleFeed":
        """Parse the inline datum of an oracle feed output"""
        datum = OracleDatum.from_cbor(payload)
        logger.debug("Loaded oracle datum %s", datum)
        return cls(datum, settings)

    @property
    def pair(self) -> str:
        return f"{self.settings.base_asset}/{self.settings.quote_asset}"

    def get_price(self) -> int:
        """Get the oracle's feed exchange rate"""
        return get_oracle_price(self.datum)

    def get_created_at(self) -> int:
        """Get the oracle's feed creation time"""
        return get_oracle_created_at(self.datum)

    def get_expiry_at(self) -> int:
        """Get the oracle's feed expiration time"""
        return get_oracle_expiry_at(self.datum)

    def exchange_rate(self) -> float:
        """Price scaled by the feed precision, for display"""
        return self.get_price() / self.settings.precision

    def quote_amount(self, base_amount: int) -> int:
        """Amount of quote asset worth base_amount of the base asset"""
        return (base_amount * self.get_price()) // self.settings.precision

    def base_amount(self, quote_amount: int) -> int:
        """Amount of base asset worth quote_amount of the quote asset"""
        price = self.get_price()
        if price <= 0:
            raise ValueError(f"Cannot convert with a non-positive price ({price})")
        return (quote_amount * self.settings.precision) // price

    def is_valid(self, current_time: int) -> bool:
        valid = is_oracle_valid(self.datum, current_time)
        if not valid:
            logger.warning(
                "Oracle feed %s expired at %s (now %s)",
                self.pair,
                format_timestamp(self.get_expiry_at()),
                format_timestamp(current_time),
            )
        return valid

    def summary(self) -> str:
        digits = len(str(self.settings.precision)) - 1
        return (
            f"Last Price: {self.exchange_rate():.{digits}f} {self.pair} "
            f"(created {format_timestamp(self.get_created_at())}, "
            f"expires {format_timestamp(self.get_expiry_at())})"
        )
