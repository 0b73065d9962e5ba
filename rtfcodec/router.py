import logging
import mimetypes
import os
from typing import Callable

from rtfcodec.codec.data_types import RtfDocument
from rtfcodec.exceptions import FileFormatNotSupportedError

logger = logging.getLogger(__name__)

mime_type_mapping = {
    "application/rtf": "rtf",
    "application/x-rtf": "rtf",
    "text/rtf": "rtf",
    "text/richtext": "rtf",
    "text/plain": "txt",
}

extension_mapping = {
    ".rtf": "rtf",
    ".txt": "txt",
    ".text": "txt",
}

Loader = Callable[..., RtfDocument]


def looks_like_rtf(data: bytes) -> bool:
    """Sniff the leading ``{\\rtf`` marker, ignoring leading whitespace."""
    return data.lstrip().startswith(b"{\\rtf")


def _load_rtf(data: bytes, strict: bool = False) -> RtfDocument:
    from rtfcodec.codec.reader import parse_rtf

    result = parse_rtf(data)
    if strict:
        result.raise_for_status(require_header=True)
    return result.document


def _load_plain_text(data: bytes, strict: bool = False) -> RtfDocument:
    from rtfcodec.codec.plain_text import document_from_plain_bytes

    document, _ = document_from_plain_bytes(data)
    return document


def get_loader_for_type(file_type: str) -> Loader:
    """Return the loader function for a file type."""
    if file_type == "rtf":
        return _load_rtf
    elif file_type == "txt":
        return _load_plain_text
    else:
        raise RuntimeError(f"No loader for file type: {file_type}")


def _file_type(path: str) -> str | None:
    path = path.lower()
    mime_type, _ = mimetypes.guess_type(path)
    if mime_type is not None and mime_type in mime_type_mapping:
        file_type = mime_type_mapping[mime_type]
        logger.debug(
            f"Detected file type: {file_type} (MIME: {mime_type}) for file: {path}"
        )
        return file_type

    extension = os.path.splitext(path)[1]
    if extension in extension_mapping:
        file_type = extension_mapping[extension]
        logger.debug(f"Detected file type: {file_type} for file: {path}")
        return file_type

    logger.debug(f"File [{path}] with mime type [{mime_type}] is not supported")
    return None


def is_supported_file(path: str) -> bool:
    """Checks if the path is a supported file"""
    return _file_type(path) is not None


def get_loader(path: str) -> Loader:
    """Analyse the path of a file and return a loader for it.
       The file does not need to exist; the path or filename alone suffices.

    :returns a function taking the raw bytes of the file and returning an
        RtfDocument
    :raises FileFormatNotSupportedError: File is not covered by any loader
    """
    file_type = _file_type(path)
    if file_type is None:
        raise FileFormatNotSupportedError(path)
    return get_loader_for_type(file_type)
