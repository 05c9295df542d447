"""Errors raised while reading an oracle datum"""

from pycardano.exception import DeserializeException


class OracleDatumError(Exception):
    """Base class for every oracle datum failure"""


class InvalidVariant(OracleDatumError):
    """Raised when a field is requested from a PriceData variant without payload"""

    def __init__(self, variant: str):
        super().__init__(f"{variant} does not carry a price map")
        self.variant = variant


class FieldNotFound(OracleDatumError):
    """Raised when the price map has no entry for the requested key"""

    def __init__(self, key: int):
        super().__init__(f"price map has no entry for key {key}")
        self.key = key


class DatumDecodeError(OracleDatumError, DeserializeException, ValueError):
    """Used when the given bytes are not an oracle datum"""
