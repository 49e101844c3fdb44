"""Core library for the vstorage browser.

Contains configuration loading, the vstorage HTTP client and the leaf value
decoder shared by the CLI and the TUI.
"""

__all__ = [
    "clients",
    "config",
    "decoder",
    "errors",
]
