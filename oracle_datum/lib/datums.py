"""
Oracle feed datum: the OracleDatum envelope, its PriceData variants and the
price map accessors validators read it with.
For the Datum Standard this follows, see:
https://github.com/Charli3-Official/oracle-datum-lib
and
https://docs.charli3.io/charli3s-documentation/oracle-feeds-datum-standard
"""

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any, Iterable, Iterator, Optional, Tuple, Union

from pycardano import PlutusData
from pycardano.serialization import CBORSerializable, RawCBOR

from ..utils.logging_config import logging
from .exceptions import DatumDecodeError, FieldNotFound, InvalidVariant
from .serialization import encode_pairs, get_constr_id_and_fields, loads

logger = logging.getLogger("Oracle-Datum")

# Price map key conventions
PRICE_KEY = 0
CREATED_AT_KEY = 1
EXPIRY_AT_KEY = 2


def _check_int(value: Any, what: str) -> None:
    # bool is an int subclass but encodes as a CBOR simple value
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{what} must be an integer, got {type(value).__name__}")


# ------------------------------#
#          Plutus Data          #
# ------------------------------#


@dataclass
class StrictPlutusData(PlutusData):
    """PlutusData that only decodes its own constructor with its exact fields"""

    @classmethod
    def from_primitive(cls, value: Any):
        cls._unpack(value)
        return super().from_primitive(value)

    @classmethod
    def _unpack(cls, value: Any) -> list:
        constr_id, payload = get_constr_id_and_fields(value)
        if constr_id != cls.CONSTR_ID:
            raise DatumDecodeError(
                f"{cls.__name__} expects constructor {cls.CONSTR_ID}, got {constr_id}"
            )
        expected = len(fields(cls))
        if len(payload) != expected:
            raise DatumDecodeError(
                f"{cls.__name__} carries {expected} field(s), got {len(payload)}"
            )
        return payload

    @classmethod
    def from_cbor(cls, payload: Union[bytes, bytearray, str]):
        """decode from CBOR bytes or hex string"""
        return cls.from_primitive(loads(payload))


# ------------------------------#
#           Price Map           #
# ------------------------------#


def get_first(price_map: Iterable[Tuple[int, int]], key: int) -> Optional[int]:
    """Value of the first pair whose key matches, None when there is none"""
    for entry_key, value in price_map:
        if entry_key == key:
            return value
    return None


@dataclass(frozen=True)
class PriceMap(CBORSerializable):
    """Ordered integer pairs of a GenericData feed.

    Pair order is part of the encoded bytes. Keys may repeat, lookups only
    see the first occurrence.
    """

    entries: Tuple[Tuple[int, int], ...] = ()

    def __post_init__(self):
        raw = self.entries.items() if isinstance(self.entries, Mapping) else self.entries
        object.__setattr__(self, "entries", tuple((key, value) for key, value in raw))
        self.validate()

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def get_first(self, key: int) -> Optional[int]:
        return get_first(self.entries, key)

    def validate(self):
        for key, value in self.entries:
            _check_int(key, "price map key")
            _check_int(value, "price map value")

    def to_shallow_primitive(self) -> RawCBOR:
        return encode_pairs(self.entries)

    def to_primitive(self) -> RawCBOR:
        # already fully encoded, nothing nested to convert
        return self.to_shallow_primitive()

    @classmethod
    def from_primitive(cls, value: Any) -> "PriceMap":
        if not isinstance(value, Mapping):
            raise DatumDecodeError(
                f"Price map must be a CBOR map, got {type(value).__name__}"
            )
        pairs = getattr(value, "pairs", None)
        try:
            return cls(pairs if pairs is not None else tuple(value.items()))
        except TypeError as err:
            raise DatumDecodeError(f"Invalid price map: {err}") from err


# ------------------------------#
#          Price Data           #
# ------------------------------#


@dataclass
class SharedData(StrictPlutusData):
    """Reserved price data variant (Tag +0)"""

    CONSTR_ID = 0


@dataclass
class ExtendedData(StrictPlutusData):
    """Reserved price data variant (Tag +1)"""

    CONSTR_ID = 1


@dataclass
class GenericData(StrictPlutusData):
    """Represents cip oracle datum PriceMap(Tag +2)"""

    CONSTR_ID = 2
    price_map: PriceMap

    def __post_init__(self):
        # PriceMap is not one of pycardano's field types, so it is checked here
        if not isinstance(self.price_map, PriceMap):
            self.price_map = PriceMap(self.price_map)

    def get_price(self) -> int:
        """get price from price map"""
        return get_price(self)

    def get_created_at(self) -> int:
        """get timestamp of the feed"""
        return get_created_at(self)

    def get_expiry_at(self) -> int:
        """get expiry of the feed"""
        return get_expiry_at(self)

    @classmethod
    def from_values(cls, price: int, timestamp: int, expiry: int) -> "GenericData":
        """build the price map in canonical key order"""
        return cls(
            PriceMap(
                (
                    (PRICE_KEY, price),
                    (CREATED_AT_KEY, timestamp),
                    (EXPIRY_AT_KEY, expiry),
                )
            )
        )


PriceData = Union[SharedData, ExtendedData, GenericData]

PRICE_DATA_VARIANTS = {
    variant.CONSTR_ID: variant for variant in (SharedData, ExtendedData, GenericData)
}


def decode_price_data(value: Any) -> PriceData:
    """Pick the PriceData variant from the constructor id"""
    constr_id, _ = get_constr_id_and_fields(value)
    variant = PRICE_DATA_VARIANTS.get(constr_id)
    if variant is None:
        logger.debug("Unknown PriceData constructor %d", constr_id)
        raise DatumDecodeError(f"Unknown PriceData constructor {constr_id}")
    return variant.from_primitive(value)


# ------------------------------#
#          Oracle Datum         #
# ------------------------------#


@dataclass
class OracleDatum(StrictPlutusData):
    """Oracle Datum"""

    CONSTR_ID = 0
    price_data: PriceData

    def __post_init__(self):
        if not isinstance(self.price_data, tuple(PRICE_DATA_VARIANTS.values())):
            raise TypeError(
                "price_data must be SharedData, ExtendedData or GenericData, "
                f"got {type(self.price_data).__name__}"
            )
        super().__post_init__()

    def get_price(self) -> int:
        return get_oracle_price(self)

    def get_created_at(self) -> int:
        return get_oracle_created_at(self)

    def get_expiry_at(self) -> int:
        return get_oracle_expiry_at(self)

    def is_valid(self, current_time: int) -> bool:
        return is_oracle_valid(self, current_time)

    @classmethod
    def from_primitive(cls, value: Any) -> "OracleDatum":
        payload = cls._unpack(value)
        return cls(decode_price_data(payload[0]))


# ------------------------------#
#           Accessors           #
# ------------------------------#


def _get_field(price_data: PriceData, key: int) -> int:
    if not isinstance(price_data, GenericData):
        raise InvalidVariant(type(price_data).__name__)
    value = get_first(price_data.price_map, key)
    if value is None:
        raise FieldNotFound(key)
    return value


def get_price(price_data: PriceData) -> int:
    return _get_field(price_data, PRICE_KEY)


def get_created_at(price_data: PriceData) -> int:
    return _get_field(price_data, CREATED_AT_KEY)


def get_expiry_at(price_data: PriceData) -> int:
    return _get_field(price_data, EXPIRY_AT_KEY)


def get_oracle_price(datum: OracleDatum) -> int:
    return get_price(datum.price_data)


def get_oracle_created_at(datum: OracleDatum) -> int:
    return get_created_at(datum.price_data)


def get_oracle_expiry_at(datum: OracleDatum) -> int:
    return get_expiry_at(datum.price_data)


def is_oracle_valid(datum: OracleDatum, current_time: int) -> bool:
    """True while current_time has not passed the expiry (inclusive)"""
    return current_time <= get_expiry_at(datum.price_data)


def create_oracle_datum(price: int, timestamp: int, expiry: int) -> OracleDatum:
    """Canonical datum with keys 0, 1, 2 in that order"""
    return OracleDatum(GenericData.from_values(price, timestamp, expiry))
