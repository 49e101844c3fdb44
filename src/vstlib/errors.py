"""Error taxonomy and error formatting utilities for vstctl."""

from __future__ import annotations

from typing import Any, Optional


class VstorageError(RuntimeError):
    """Base class for failures talking to or decoding vstorage."""


class FetchFailed(VstorageError):
    """Transport-level failure: connection, timeout or non-2xx status."""

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class DecodeFailed(VstorageError):
    """Response body did not parse into the expected JSON shape.

    When raised by the leaf decoder, ``cleaned`` holds the cleaned text so
    callers can still show the user something.
    """

    def __init__(self, message: str, cleaned: Optional[str] = None) -> None:
        super().__init__(message)
        self.cleaned = cleaned


class DisplaySurfaceFailed(VstorageError):
    """The terminal UI could not be started or crashed while running."""


def format_error_message(operation: str, error: Exception, context: dict[str, Any] | None = None) -> str:
    """Format a user-friendly error message based on the exception type and context."""
    error_str = str(error)
    context = context or {}
    path = context.get("path", "path")

    if isinstance(error, FetchFailed) and error.status_code is not None:
        if error.status_code == 404:
            return f"Path '{path}' was not found on the server. Original error: {error_str}"
        if error.status_code >= 500:
            return (
                f"The vstorage server failed while trying to {operation} "
                f"(HTTP {error.status_code}). Original error: {error_str}"
            )

    # Connection-related errors
    if "connection" in error_str.lower() or "timeout" in error_str.lower() or "timed out" in error_str.lower():
        base_url = context.get("base_url", "the vstorage endpoint")
        return (
            f"Failed to reach {base_url}. "
            f"Please check your network connection and the configured api_base_url. "
            f"Original error: {error_str}"
        )

    if isinstance(error, DecodeFailed):
        return (
            f"The server response for '{path}' could not be decoded as JSON. "
            f"Original error: {error_str}"
        )

    # Generic error with helpful context
    return f"Failed to {operation}: {error_str}"


def suggest_troubleshooting_steps(operation: str, error: Exception) -> list[str]:
    """Suggest troubleshooting steps based on the operation and error."""
    error_str = str(error).lower()
    suggestions = []

    if "connection" in error_str or "timeout" in error_str or "timed out" in error_str:
        suggestions.extend([
            "Check that the endpoint answers: curl <api_base_url>/children/published",
            "Increase 'timeout' in your config file",
            "Use --base-url to point at another vstorage endpoint",
        ])

    elif isinstance(error, FetchFailed) and error.status_code == 404:
        suggestions.extend([
            "List the parent node first: vstctl children <parent path>",
            "Check the path spelling; segments are separated by dots",
        ])

    elif isinstance(error, DecodeFailed):
        suggestions.extend([
            "Inspect the raw payload: vstctl data <path> --raw",
            "Check that api_base_url points at a vstorage REST endpoint",
        ])

    if not suggestions:
        suggestions.extend([
            "Check the logs with -v/--verbose flag for more details",
            "Verify your configuration file is correct",
        ])

    return suggestions


def format_config_error(error: Exception) -> str:
    """Format configuration-related error messages."""
    error_str = str(error)

    if "vstctl_config path not found" in error_str.lower():
        return (
            f"Configuration error: {error_str}\n"
            "Unset VSTCTL_CONFIG to fall back to ~/.config/vstctl/config.yaml "
            "or the built-in defaults."
        )

    return f"Configuration error: {error_str}"
