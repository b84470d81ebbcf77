import logging
import socket
from typing import List, Optional

from . import protocol
from .endpoint import Endpoint, resolve_endpoint
from .errors import (ConnectionFailed, ProtocolMismatch, RequestFailed, ResponseFailed,
                     SolvedClientError, Timeout)

_UNSET = object()


class SolvedClient:
    """
    Client for a solved server.

    Holds at most one connection, opened on the first command after the
    server address is set and reused until an I/O error (or a new address)
    throws it away. Nothing is retried here: a failed call raises and the
    next call connects again.

    Not thread-safe. Share an instance between threads only behind a lock
    held for the whole exchange.
    """

    def __init__(self, address: Optional[str] = None, timeout: Optional[float] = None,
                 logger: Optional[logging.Logger] = None,
                 resolver=socket.gethostbyname, strict_port: bool = False):
        self.timeout = timeout
        self.log = logger if logger is not None else logging.getLogger(__name__)
        self.resolver = resolver
        self.strict_port = strict_port
        self.endpoint: Optional[Endpoint] = None
        self.sock = None
        self.file = None
        if address is not None:
            self.set_server(address)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    @property
    def connected(self) -> bool:
        return self.file is not None

    def set_server(self, address: str, strict: Optional[bool] = None) -> Endpoint:
        self.invalidate()
        if strict is None:
            strict = self.strict_port
        try:
            endpoint = resolve_endpoint(address, resolver=self.resolver, strict=strict)
        except SolvedClientError as exc:
            self.log.error("%s", exc)
            raise
        self.endpoint = endpoint
        self.log.debug("Solved server set to %s (%s)", endpoint, endpoint.address)
        return endpoint

    def ensure_connected(self, timeout=_UNSET):
        if self.file is not None:
            return
        if self.endpoint is None:
            raise RuntimeError("No solved server configured. Call set_server() first.")
        if timeout is _UNSET:
            timeout = self.timeout

        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        except OSError as exc:
            self.log.error("Couldn't create socket: %s", exc)
            raise ConnectionFailed(f"Couldn't create socket: {exc}") from exc

        try:
            sock.settimeout(timeout)
            sock.connect((self.endpoint.address, self.endpoint.port))
        except socket.timeout as exc:
            self._close_socket(sock)
            self.log.error("Timed out connecting to %s", self.endpoint)
            raise Timeout(f"Timed out connecting to {self.endpoint}") from exc
        except (OSError, OverflowError) as exc:
            self._close_socket(sock)
            self.log.error("Couldn't connect to server %s: %s", self.endpoint, exc)
            raise ConnectionFailed(f"Couldn't connect to server {self.endpoint}: {exc}") from exc

        self.sock = sock
        self.file = sock.makefile("rwb")
        self.log.debug("Connected to solved server %s", self.endpoint)

    def _close_socket(self, sock):
        try:
            sock.close()
        except OSError as exc:
            self.log.warning("Failed to close socket: %s", exc)

    def invalidate(self):
        """Drop the current connection, if any. Close errors are only logged."""
        file, sock = self.file, self.sock
        self.file = None
        self.sock = None
        if file is not None:
            try:
                file.close()
            except OSError as exc:
                self.log.warning("Failed to close previous connection to server: %s", exc)
        if sock is not None:
            self._close_socket(sock)

    def close(self):
        self.invalidate()

    def send_command(self, request: bytes, timeout=_UNSET) -> bytes:
        """Write one request line and return the raw response line."""
        if timeout is _UNSET:
            timeout = self.timeout
        self.ensure_connected(timeout)
        self.sock.settimeout(timeout)

        self.log.debug("Request: %r", request)
        try:
            self.file.write(request)
            self.file.flush()
        except socket.timeout as exc:
            self.invalidate()
            self.log.error("Timed out sending request %r", request)
            raise Timeout(f"Timed out sending request {request!r}") from exc
        except OSError as exc:
            self.invalidate()
            self.log.error("Failed to write request to server: %s", exc)
            raise RequestFailed(f"Failed to write request to server: {exc}") from exc

        return self._read_response()

    def _read_response(self) -> bytes:
        try:
            line = self.file.readline()
        except socket.timeout as exc:
            self.invalidate()
            self.log.error("Timed out waiting for response")
            raise Timeout("Timed out waiting for response") from exc
        except OSError as exc:
            self.invalidate()
            self.log.error("Couldn't read response: %s", exc)
            raise ResponseFailed(f"Couldn't read response: {exc}") from exc

        if not line.endswith(b"\n"):
            self.invalidate()
            self.log.error("Connection closed by server before a full response line")
            raise ResponseFailed("Connection closed by server before a full response line")
        self.log.debug("Response: %r", line)
        return line

    def get(self, filenum: int, fieldnum: int, timeout=_UNSET) -> bool:
        """Return True if (filenum, fieldnum) has been solved."""
        line = self.send_command(protocol.format_request("get", filenum, fieldnum), timeout)
        return protocol.parse_solved(line)

    def set(self, filenum: int, fieldnum: int, timeout=_UNSET):
        """Mark (filenum, fieldnum) solved. Returns once the server acknowledges."""
        self.send_command(protocol.format_request("set", filenum, fieldnum), timeout)

    def getall(self, filenum: int, firstfield: int, lastfield: int, maxnfields: int = 0,
               timeout=_UNSET) -> List[int]:
        """
        List the unsolved fields of a file between firstfield and lastfield.

        At most maxnfields are returned; 0 means no limit. The order is
        whatever the server reports.
        """
        request = protocol.format_request("getall", filenum, firstfield, lastfield, maxnfields)
        line = self.send_command(request, timeout)
        try:
            return protocol.parse_unsolved(line, filenum)
        except ProtocolMismatch as exc:
            self.log.error("%s", exc)
            raise
