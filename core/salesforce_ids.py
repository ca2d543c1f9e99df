# =============================================================================
# core/salesforce_ids.py  -  Salesforce 15 → 18 Character Id Conversion
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Salesforce record ids come in two forms:
#     - 15 characters, case-sensitive ("00130000003DzUi")
#     - 18 characters, case-safe: the same 15 plus a 3-character checksum
#
#   Opine stores Salesforce-sourced deals under the 18-character form, so
#   any 15-character id an assistant pastes in must be converted first.
#
# THE ALGORITHM:
#   Split the 15 characters into three groups of five.  For each group,
#   build a 5-bit number where bit j is set when character j is an
#   uppercase ASCII letter.  Map each 0..31 value through
#
#       ABCDEFGHIJKLMNOPQRSTUVWXYZ012345
#
#   and append the three resulting characters.
#
#   Worked example, "00130000003DzUi":
#       "00130" → no uppercase             → 0  → "A"
#       "00000" → no uppercase             → 0  → "A"
#       "3DzUi" → D (bit 1), U (bit 3)     → 10 → "K"
#   Result: "00130000003DzUiAAK"
#
# Pure functions, no state.
# =============================================================================

from core.errors import EmptyInputError, InvalidLengthError

CHECKSUM_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ012345"
EXTERNAL_ID_PREFIX = "eid:"

_SHORT_LENGTH = 15
_LONG_LENGTH = 18
_GROUP_SIZE = 5


def _is_upper_ascii(char: str) -> bool:
    # str.isupper() is Unicode-aware; only A-Z count here.
    return "A" <= char <= "Z"


def convert_15_to_18(id15: str) -> str:
    """Append the case-safe checksum to a 15-character Salesforce id.

    Raises:
        EmptyInputError: ``id15`` is empty.
        InvalidLengthError: ``id15`` is not exactly 15 characters.
    """
    if not id15:
        raise EmptyInputError()
    if len(id15) != _SHORT_LENGTH:
        raise InvalidLengthError(len(id15), allowed=(_SHORT_LENGTH,))

    suffix = []
    for start in range(0, _SHORT_LENGTH, _GROUP_SIZE):
        group = id15[start:start + _GROUP_SIZE]
        flags = 0
        for bit, char in enumerate(group):
            if _is_upper_ascii(char):
                flags |= 1 << bit
        suffix.append(CHECKSUM_ALPHABET[flags])

    return id15 + "".join(suffix)


def ensure_id18(sf_id: str) -> str:
    """Normalize a 15- or 18-character Salesforce id to 18 characters.

    18-character input is returned unchanged; its checksum is not verified.

    Raises:
        EmptyInputError: ``sf_id`` is empty.
        InvalidLengthError: length is neither 15 nor 18.
    """
    if not sf_id:
        raise EmptyInputError()
    if len(sf_id) == _LONG_LENGTH:
        return sf_id
    if len(sf_id) == _SHORT_LENGTH:
        return convert_15_to_18(sf_id)
    raise InvalidLengthError(len(sf_id), allowed=(_SHORT_LENGTH, _LONG_LENGTH))


def to_external_deal_id(sf_id: str) -> str:
    """Turn a raw Salesforce id into Opine's external-reference deal id."""
    return f"{EXTERNAL_ID_PREFIX}{ensure_id18(sf_id)}"
