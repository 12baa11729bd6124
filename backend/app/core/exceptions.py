"""Custom exceptions for the ride ledger application."""

from __future__ import annotations


class LedgerError(Exception):
    """Base exception for all ledger errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(LedgerError):
    """Raised when input validation fails before any mutation."""

    pass


class ConfigurationError(LedgerError):
    """Raised when the remote mirror credentials cannot be used."""

    pass


class RemoteMirrorError(LedgerError):
    """Raised when a remote record or remote call cannot be handled."""

    pass


class MalformedLedgerError(LedgerError):
    """Raised when the persisted ledger payload cannot be decoded."""

    def __init__(self, message: str, raw_payload: str = "", details: dict | None = None) -> None:
        super().__init__(message, details)
        self.raw_payload = raw_payload
