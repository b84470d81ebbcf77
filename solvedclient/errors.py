class SolvedClientError(Exception):
    """Base class for every failure the solved-server client reports."""


class InvalidAddress(SolvedClientError):
    """The server address is not of the form host:port."""


class HostNotFound(SolvedClientError):
    """The server hostname could not be resolved."""


class ConnectionFailed(SolvedClientError):
    pass


class RequestFailed(SolvedClientError):
    pass


class ResponseFailed(SolvedClientError):
    pass


class Timeout(SolvedClientError):
    """An exchange with the server did not finish before its deadline."""


class ProtocolMismatch(SolvedClientError):
    """The server answered with a line that does not fit the expected grammar."""
