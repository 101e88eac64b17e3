from __future__ import annotations


class ChatbridgeError(Exception):
    """Base exception for this project."""


class ConfigError(ChatbridgeError):
    """Raised when configuration is invalid or incomplete."""

    def __init__(self, message: str, *, path: str | None = None):
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path


class SourceUnavailableError(ConfigError):
    """The YAML file or a required environment variable is missing."""


class MalformedValueError(ConfigError):
    """A value is present but cannot be used in its declared shape."""
