"""Helpers for validating and naming uploaded files."""

import posixpath
import re

from file_manager.errors import ErrorCode, RequestValidationFailed

ALLOWED_MIME_TYPES = [
    # Images
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/svg+xml",
    # Documents
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    # Text
    "text/plain",
    "text/csv",
    "text/html",
    "text/css",
    "text/javascript",
    "application/json",
    # Archives
    "application/zip",
    "application/x-rar-compressed",
    "application/gzip",
    # Video
    "video/mp4",
    "video/webm",
    "video/quicktime",
    # Audio
    "audio/mpeg",
    "audio/wav",
    "audio/ogg",
]

UNSAFE_KEY_CHARACTERS = re.compile(r"[^A-Za-z0-9._-]")
REPEATED_UNDERSCORES = re.compile(r"_{2,}")
MAX_STEM_LENGTH = 200

SIZE_UNITS = ["Bytes", "KB", "MB", "GB", "TB"]


def _base_name(file_name: str) -> str:
    # Browsers on Windows may send the full client-side path
    return posixpath.basename(file_name.replace("\\", "/"))


def get_file_extension(file_name: str) -> str:
    """Lower-cased extension including the dot, or "" when there is none."""
    return posixpath.splitext(_base_name(file_name))[1].lower()


def sanitize_key_component(value: str) -> str:
    """Replace every character outside [A-Za-z0-9._-] with an underscore."""
    return UNSAFE_KEY_CHARACTERS.sub("_", value)


def sanitize_file_name(file_name: str) -> str:
    """
    Reduce a client-supplied file name to a safe storage name.

    Directory components are dropped, unsafe characters in the stem become
    underscores (runs collapsed), the stem is capped at 200 characters and the
    extension is kept, lower-cased.

    :param file_name: The name as sent by the client, e.g. "../My Plans/Floor #1.PDF"
    :return: The sanitized name, e.g. "Floor_1.pdf"
    """
    base_name = _base_name(file_name)
    stem, extension = posixpath.splitext(base_name)

    stem = sanitize_key_component(stem)
    stem = REPEATED_UNDERSCORES.sub("_", stem)[:MAX_STEM_LENGTH]

    return stem + sanitize_key_component(extension).lower()


def is_allowed_mime_type(mime_type: str) -> bool:
    return mime_type in ALLOWED_MIME_TYPES


def is_file_size_allowed(file_size: int, max_file_size: int) -> bool:
    return 0 < file_size <= max_file_size


def get_mime_type_category(mime_type: str) -> str:
    """Coarse grouping of a MIME type, used for display and filtering."""
    for prefix in ("image", "video", "audio", "text"):
        if mime_type.startswith(f"{prefix}/"):
            return prefix
    if "pdf" in mime_type:
        return "pdf"
    if "word" in mime_type or "document" in mime_type:
        return "document"
    if "excel" in mime_type or "spreadsheet" in mime_type:
        return "spreadsheet"
    if "powerpoint" in mime_type or "presentation" in mime_type:
        return "presentation"
    if "zip" in mime_type or "rar" in mime_type or "gzip" in mime_type:
        return "archive"
    return "other"


def format_file_size(num_bytes: int) -> str:
    """Human readable size, e.g. 1536 -> "1.5 KB"."""
    if num_bytes <= 0:
        return "0 Bytes"

    value = float(num_bytes)
    unit = 0
    while value >= 1024 and unit < len(SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    # Drop trailing zeros: 100.0 -> "100", 1.50 -> "1.5"
    return f"{round(value, 2):g} {SIZE_UNITS[unit]}"


def validate_upload_request(file_name: str, file_type: str, file_size: int, max_file_size: int) -> None:
    """
    Check an upload request before a URL is minted.

    :raises RequestValidationFailed: with the offending field in ``details``.
    """
    if not file_name or not file_name.strip():
        raise RequestValidationFailed(
            "File name is required",
            code=ErrorCode.MISSING_REQUIRED_FIELD,
            details={"field": "file_name"},
        )

    if not file_type or not file_type.strip():
        raise RequestValidationFailed(
            "File type is required",
            code=ErrorCode.MISSING_REQUIRED_FIELD,
            details={"field": "file_type"},
        )

    if not is_allowed_mime_type(file_type):
        raise RequestValidationFailed(
            f"File type '{file_type}' is not allowed",
            code=ErrorCode.INVALID_FILE_TYPE,
            details={"field": "file_type"},
        )

    if not file_size or file_size <= 0:
        raise RequestValidationFailed(
            "File size must be greater than 0",
            details={"field": "file_size"},
        )

    if not is_file_size_allowed(file_size, max_file_size):
        raise RequestValidationFailed(
            f"File size exceeds maximum allowed size of {format_file_size(max_file_size)}",
            code=ErrorCode.FILE_TOO_LARGE,
            details={"field": "file_size"},
        )
