class RtfCodecError(Exception):
    """Base class for errors raised around the RTF codec."""

    def __init__(self, message: str = None, *, cause: Exception = None):
        if message is None:
            message = "RTF codec error"
        super().__init__(message)
        self.__cause__ = cause  # Optional chaining for debugging


class EmptyInputError(RtfCodecError):
    """Raised when a caller requires content but the input held no tokens."""

    def __init__(self, message: str = None, *, cause: Exception = None):
        super().__init__(message or "Input is empty", cause=cause)


class NotRtfError(RtfCodecError):
    """Raised when the input carries neither groups nor control words."""

    def __init__(self, message: str = None, *, cause: Exception = None):
        super().__init__(message or "Input does not look like RTF", cause=cause)


class MissingRtfHeaderError(RtfCodecError):
    """Raised in strict mode when no \\rtf control word was seen."""

    def __init__(self, message: str = None, *, cause: Exception = None):
        super().__init__(message or "RTF header (\\rtf) not found", cause=cause)


class DeserializationError(RtfCodecError):
    """Raised when a serialized document payload cannot be restored."""


class FileFormatNotSupportedError(Exception):
    """Raised when the file format of a path is not handled by the router."""

    def __init__(self, file_path: str, message: str = None, *, cause: Exception = None):
        self.file_path = file_path
        if message is None:
            message = f"File format not supported: {file_path}"
        super().__init__(message)
        self.__cause__ = cause
