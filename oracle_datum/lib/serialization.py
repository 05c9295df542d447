"""
CBOR helpers the oracle datums need on top of pycardano.

pycardano decodes CBOR maps into dicts, which keeps only the last value of
a repeated key. The price map is an ordered list of pairs, so map decoding
is hooked here to keep every pair, the same way pycardano hooks array
decoding to keep indefinite-length arrays.
"""

from typing import Any, Iterable, List, Tuple, Union

from cbor2 import CBORTag, FrozenDict, dumps
from pycardano.cbor import cbor2
from pycardano.exception import DeserializeException
from pycardano.plutus import get_constructor_id_and_fields
from pycardano.serialization import IndefiniteList, RawCBOR

from ..utils.logging_config import logging
from .exceptions import DatumDecodeError

logger = logging.getLogger("Oracle-Datum")


class PairDict(dict):
    """A decoded CBOR map that also remembers every (key, value) pair in order"""

    def __init__(self, pairs: Iterable[Tuple[Any, Any]] = ()):
        pairs = tuple(pairs)
        super().__init__(pairs)
        self.pairs = pairs


def decode_map(self, subtype: int) -> Any:
    # Major tag 5
    length = self._decode_length(subtype, allow_indefinite=True)
    pairs = []
    while length is None or len(pairs) < length:
        key = self._decode(immutable=True, unshared=True)
        if length is None and key is cbor2._decoder.break_marker:
            break
        pairs.append((key, self._decode(unshared=True)))
    if self._immutable:
        return FrozenDict(pairs)
    dictionary = PairDict(pairs)
    if self._object_hook:
        return self._object_hook(self, dictionary)
    return dictionary


try:
    cbor2._decoder.major_decoders[5] = decode_map
except Exception as e:
    logger.warning("Failed to replace major decoder for map: %s", e)


def encode_pairs(pairs: Iterable[Tuple[int, int]]) -> RawCBOR:
    """Definite-length CBOR map written pair by pair, repeated keys included"""
    pairs = list(pairs)
    # major type 5 shares the length encoding of major type 0
    header = bytearray(dumps(len(pairs)))
    header[0] |= 0xA0
    body = b"".join(dumps(key) + dumps(value) for key, value in pairs)
    return RawCBOR(bytes(header) + body)


def get_constr_id_and_fields(value: Any) -> Tuple[int, List[Any]]:
    """Constructor id and field list of a decoded constructor tag"""
    if not isinstance(value, CBORTag):
        raise DatumDecodeError(f"Expected a constructor tag, got {type(value).__name__}")
    try:
        constr_id, fields = get_constructor_id_and_fields(value)
    except (DeserializeException, TypeError) as err:
        raise DatumDecodeError(f"Malformed constructor tag {value.tag}: {err}") from err
    # bool is an int subclass but never a constructor id
    if isinstance(constr_id, bool) or not isinstance(constr_id, int):
        raise DatumDecodeError(f"Constructor id must be an integer, got {constr_id!r}")
    if not isinstance(fields, (list, tuple, IndefiniteList)):
        raise DatumDecodeError(
            f"Constructor fields must be an array, got {type(fields).__name__}"
        )
    return constr_id, list(fields)


def loads(payload: Union[bytes, bytearray, str]) -> Any:
    """Decode CBOR bytes (or their hex form) into primitives.

    Maps come back as PairDict, so repeated keys are still visible through
    its ``pairs``.
    """
    if isinstance(payload, str):
        try:
            payload = bytes.fromhex(payload)
        except ValueError as err:
            logger.debug("Rejected non-hex datum payload: %s", err)
            raise DatumDecodeError(f"Invalid hex payload: {err}") from err
    try:
        return cbor2.loads(bytes(payload))
    except cbor2.CBORError as err:
        logger.debug("Rejected malformed CBOR payload: %s", err)
        raise DatumDecodeError(f"Invalid CBOR payload: {err}") from err
