"""Line framing for the solved-server protocol.

Requests are one ASCII line each:

    get <file> <field>
    set <file> <field>
    getall <file> <first> <last> <max>

Responses are one line too. ``get`` is answered with a line starting with
``solved`` when the field is done, ``set`` with an acknowledgement whose
content does not matter, and ``getall`` with ``unsolved <file> <field>...``.
"""

import re
from typing import List

from .errors import ProtocolMismatch

SOLVED = b"solved"
UNSOLVED = "unsolved"
_DECIMAL = re.compile(r"[+-]?[0-9]+")


def _check_int(value):
    # bool is an int subclass but "get True 1" is not a request
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"protocol arguments must be int, not {type(value).__name__}")
    return value


def format_request(command: str, *args) -> bytes:
    fields = [command] + ["%d" % _check_int(arg) for arg in args]
    return (" ".join(fields) + "\n").encode("ascii")


def parse_solved(line: bytes) -> bool:
    """Prefix match only: 'solvedXYZ' is still solved."""
    return line.startswith(SOLVED)


def parse_unsolved(line: bytes, filenum: int) -> List[int]:
    try:
        text = line.decode("ascii")
    except UnicodeDecodeError:
        raise ProtocolMismatch(f"Couldn't parse response: {line!r}")

    parts = text.split()
    if len(parts) < 2 or parts[0] != UNSOLVED:
        raise ProtocolMismatch(f"Couldn't parse response: {text.rstrip()}")

    if not all(_DECIMAL.fullmatch(part) for part in parts[1:]):
        raise ProtocolMismatch(f"Couldn't parse response: {text.rstrip()}")
    numbers = [int(part) for part in parts[1:]]

    if numbers[0] != filenum:
        raise ProtocolMismatch(f"Expected file number {filenum}, not {numbers[0]}.")
    return numbers[1:]
