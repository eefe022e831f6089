"""Composite line identifiers of the form ``"<textId>_<index>"``."""

from typing import Tuple

from errors import InvalidArgument

SEPARATOR = "_"


def line_key(text_id: int, index: int) -> str:
    return f"{int(text_id)}{SEPARATOR}{int(index)}"


def parse_line_key(key: str) -> Tuple[int, int]:
    """Split a line id at its last separator into (text_id, index).

    Text ids are integers and never contain the separator, so parsing from the
    right is always unambiguous.
    """
    if not isinstance(key, str) or SEPARATOR not in key:
        raise InvalidArgument(f"Malformed line id: {key!r}")
    text_part, _, index_part = key.rpartition(SEPARATOR)
    # int() would accept "1_2" as 12
    if not (text_part.isdigit() and index_part.isdigit()):
        raise InvalidArgument(f"Malformed line id: {key!r}")
    try:
        return int(text_part), int(index_part)
    except ValueError:
        raise InvalidArgument(f"Malformed line id: {key!r}") from None
