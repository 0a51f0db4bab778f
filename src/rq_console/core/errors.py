"""Error taxonomy.

Only ParseError is fatal (startup). Everything else is caught at the
Application boundary or inside the dispatcher worker and shown to the user
as an Error message.
"""


class RqError(Exception):
    """Base class for every error the console reports to the user."""


class ParseError(RqError):
    def __init__(self, message: str, line: int | None = None) -> None:
        self.line = line
        if line is not None:
            message = "line {}: {}".format(line, message)
        super().__init__(message)


class TransportError(RqError):
    pass


class FileWriteError(RqError):
    pass


class EmptyFilenameError(RqError):
    def __init__(self, message: str = "File name cannot be empty") -> None:
        super().__init__(message)


class NoResponseError(RqError):
    def __init__(self, message: str = "Request not sent") -> None:
        super().__init__(message)


class DispatcherBusyError(RqError):
    def __init__(self, message: str = "A request is already in flight") -> None:
        super().__init__(message)
