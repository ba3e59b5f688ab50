"""Size-limit parsing for php.ini style directives ("8M", "0x400", "+2g")."""

import re
import sys

from uploads.core.settings import settings

UNITS = "kmgt"

_DIGITS = {
    8: re.compile(r"[0-7]+"),
    10: re.compile(r"-?[0-9]+"),
    16: re.compile(r"[0-9a-f]+"),
}


def _leading_int(text: str, base: int) -> int:
    """Parse the longest valid digit prefix of ``text`` in ``base``, 0 when there is none."""
    match = _DIGITS[base].match(text)
    return int(match.group(), base) if match else 0


def parse_size(raw: str | None) -> int:
    """
    Return the byte count described by a size directive.

    Base detection runs on the digits before the unit suffix is removed:
    ``0x`` selects hexadecimal, a bare leading ``0`` octal, anything else
    decimal. The last character selects the unit and every larger unit
    cascades through the smaller ones, so ``1t`` is ``1024 ** 4``.
    Never raises: empty or unparseable input yields 0.
    """
    if not raw:
        return 0

    size = raw.lower()
    number = size.lstrip("+")

    if number.startswith("0x"):
        value = _leading_int(number[2:], 16)
    elif number.startswith("0"):
        value = _leading_int(number, 8)
    else:
        value = _leading_int(number, 10)

    suffix = size[-1]
    if suffix in UNITS:
        value *= 1024 ** (UNITS.index(suffix) + 1)

    return value


def max_file_size() -> int:
    """Binding upload limit: the smaller of the request-body and per-file limits, 0 meaning unbounded."""
    post_max = parse_size(settings.POST_MAX_SIZE)
    upload_max = parse_size(settings.UPLOAD_MAX_FILESIZE)
    return min(post_max or sys.maxsize, upload_max or sys.maxsize)
