import socket
import sys
import threading
from pathlib import Path

import pytest

# Add the repo root to sys.path so we can import solvedclient
ROOT = Path(__file__).resolve().parent.parent
if ROOT.as_posix() not in sys.path:
    sys.path.insert(0, ROOT.as_posix())

from solvedclient import SolvedClient  # noqa: E402

# scripted reply that reads the request and never answers
HANG = object()


class Partial(bytes):
    """Scripted reply that is sent and then followed by a hang-up."""


class SolvedStore:
    """In-memory solved set speaking the server side of the protocol."""

    def __init__(self):
        self.solved = set()
        self.lock = threading.Lock()

    def execute_command(self, command_line):
        parts = command_line.split()
        cmd = parts[0]
        try:
            args = [int(a) for a in parts[1:]]
        except ValueError:
            return f"error bad arguments: {command_line}"

        with self.lock:
            if cmd == "get" and len(args) == 2:
                return "solved" if tuple(args) in self.solved else "unsolved"
            elif cmd == "set" and len(args) == 2:
                self.solved.add(tuple(args))
                return "ok"
            elif cmd == "getall" and len(args) == 4:
                filenum, first, last, maxn = args
                fields = [f for f in range(first, last + 1) if (filenum, f) not in self.solved]
                if maxn:
                    fields = fields[:maxn]
                return " ".join(["unsolved"] + [str(n) for n in [filenum] + fields])
            else:
                return f"error unknown command: {command_line}"


class FakeSolvedServer:
    """
    Threaded solved server on an ephemeral port.

    Lines queued in ``scripted`` are sent instead of the store's answer, one
    per request. A queued ``None`` closes the connection without answering,
    a ``Partial`` is sent just before closing, and ``HANG`` swallows the
    request.
    """

    def __init__(self, host="127.0.0.1"):
        self.db = SolvedStore()
        self.scripted = []
        self.requests = []
        self.connections = 0
        self.running = False
        self.server_socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.server_socket.bind((host, 0))
        self.server_socket.listen()
        self.host, self.port = self.server_socket.getsockname()

    @property
    def address(self):
        return f"{self.host}:{self.port}"

    def start(self):
        self.running = True
        threading.Thread(target=self._accept_loop, daemon=True).start()

    def _accept_loop(self):
        while self.running:
            try:
                client_sock, _ = self.server_socket.accept()
            except OSError:
                break
            self.connections += 1
            threading.Thread(target=self.handle_client, args=(client_sock,), daemon=True).start()

    def handle_client(self, client_sock):
        with client_sock:
            buffer = b""
            while True:
                try:
                    data = client_sock.recv(1024)
                except OSError:
                    break
                if not data:
                    break
                buffer += data
                while b"\n" in buffer:
                    line, buffer = buffer.split(b"\n", 1)
                    command_line = line.decode().strip()
                    if not command_line:
                        continue
                    self.requests.append(command_line)

                    if self.scripted:
                        reply = self.scripted.pop(0)
                        if reply is None:
                            return
                        if reply is not HANG:
                            client_sock.sendall(reply)
                        if isinstance(reply, Partial):
                            return
                        continue

                    result = self.db.execute_command(command_line)
                    client_sock.sendall((result + "\n").encode())

    def stop(self):
        self.running = False
        try:
            self.server_socket.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self.server_socket.close()


@pytest.fixture
def solved_server():
    server = FakeSolvedServer()
    server.start()
    yield server
    server.stop()


@pytest.fixture
def client(solved_server):
    c = SolvedClient(solved_server.address, timeout=5)
    yield c
    c.close()


@pytest.fixture
def closed_port():
    """Return a port on 127.0.0.1 with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]
