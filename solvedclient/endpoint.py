import re
import socket
from dataclasses import dataclass

from .errors import HostNotFound, InvalidAddress

# atoi-style: optional whitespace and sign, then whatever digits follow
_LENIENT_PORT = re.compile(r"\s*([+-]?\d+)", re.ASCII)


@dataclass(frozen=True)
class Endpoint:
    host: str
    address: str
    port: int

    def __str__(self):
        return f"{self.host}:{self.port}"


def parse_port(text: str, strict: bool = False) -> int:
    """
    Turn the text after the ':' into a port number.

    The lenient mode takes the numeric prefix and ignores anything after it,
    so "6000/tcp" is 6000 and "abc" is 0. Strict mode wants plain digits
    in the valid port range.
    """
    if strict:
        if not text.isdigit() or not text.isascii():
            raise InvalidAddress(f"Invalid port: {text!r}")
        port = int(text)
        if port > 65535:
            raise InvalidAddress(f"Port out of range: {port}")
        return port

    match = _LENIENT_PORT.match(text)
    if not match:
        return 0
    return int(match.group(1))


def parse_address(address: str, strict: bool = False):
    """Split 'host:port' into (host, port)."""
    if address is None or ":" not in address:
        raise InvalidAddress(f"Invalid IP:port address: {address}")
    host, _, port_text = address.partition(":")
    return host, parse_port(port_text, strict=strict)


def resolve_endpoint(address: str, resolver=socket.gethostbyname, strict: bool = False) -> Endpoint:
    host, port = parse_address(address, strict=strict)
    try:
        resolved = resolver(host)
    except (OSError, UnicodeError, ValueError, TypeError) as exc:
        # idna rejects empty or overlong labels, NUL bytes raise TypeError/ValueError
        raise HostNotFound(f'Solved server "{host}" not found: {exc}') from exc
    return Endpoint(host=host, address=resolved, port=port)
