"""Exceptions raised by the curriculum client layer."""


class NureduError(Exception):
    """Base class for curriculum client errors."""


class ValidationError(NureduError):
    """A lesson draft is missing one of its required selections."""

    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__("missing required fields: " + ", ".join(self.missing))


class NetworkError(NureduError):
    """A call to the lesson API failed or was rejected."""

    def __init__(self, message: str, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(NureduError):
    """A stored serialized-array value could not be decoded."""

    def __init__(self, field: str, raw):
        self.field = field
        self.raw = raw
        super().__init__(f"{field}: not a serialized string array: {raw!r}")
