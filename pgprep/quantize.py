import re
from typing import Mapping

from pgprep.constants import KNOWN_MEMORY_VARS, QUANTIZE_UNITS, SIZE_UNIT_MAP

QUANTITY_PATTERN = re.compile(r"^\s*(\d+)\s*([kMGT]B)?\s*$")


def binary_round(value: int) -> str:
    """
    Truncate a byte count to its 4 most significant bits and render it in the unit
    notation postgresql.conf expects.

    Keeping only 4 significant bits means SHOW will likely report the setting with a
    larger divisor. Anything of 1024 or more ends in "GB", "MB" or "kB". The rendered
    value is never above the input and always more than 8/9 of it, since the top
    4 bits are at least 8 units of a multiplier the remainder never reaches.

    """
    if value < 0:
        raise ValueError(f"Cannot quantize a negative value: {value}")
    if value == 0:
        return "0"

    multiplier = 1

    # Truncate value to 4 most significant bits
    while value >= 16:
        value //= 2
        multiplier *= 2

    # Factor any remaining powers of 2 into the multiplier
    while value % 2 == 0:
        value //= 2
        multiplier *= 2

    # Factor enough powers of 2 back into the value to leave the multiplier as a
    # power of 1024 that matches one of the units
    units = ""
    for unit in QUANTIZE_UNITS:
        divisor = SIZE_UNIT_MAP[unit]
        if multiplier >= divisor:
            while multiplier > divisor:
                value *= 2
                multiplier //= 2
            multiplier = 1
            units = unit
            break

    return f"{multiplier * value}{units}"


def parse_quantity(text: str) -> int:
    """
    Convert a postgresql.conf memory value ("96MB", "12kB", "15") back to bytes.

    """
    match = QUANTITY_PATTERN.match(text)
    if not match:
        raise ValueError(f"Not a memory quantity: {text!r}")

    number, unit = match.groups()
    return int(number) * (SIZE_UNIT_MAP[unit] if unit else 1)


def round_memory_settings(values: Mapping[str, int]) -> dict[str, str]:
    """
    Quantize a batch of memory settings, given in bytes, into postgresql.conf values.

    """
    unknown = set(values) - set(KNOWN_MEMORY_VARS)
    if unknown:
        raise KeyError(f"Not memory settings: {', '.join(sorted(unknown))}")

    return {key: binary_round(value) for key, value in values.items()}
