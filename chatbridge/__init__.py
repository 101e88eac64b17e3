"""chatbridge: configuration layer for the messaging/webhook service."""

__version__ = "0.1.0"
