"""
domain/exceptions.py
──────────────────────────────────────────────────────────────────────────────
Custom exception hierarchy.

All exceptions are rooted at EIRegionsError so callers can catch broadly
(except EIRegionsError) or narrowly (except ExtractionError).

The API layer maps these to HTTP status codes:
  InvalidPostalCodeError → 422
  StoreError             → 503
  ExtractionError        → 404
  FetchError             → 502
"""
from __future__ import annotations


class EIRegionsError(Exception):
    """Base exception for all application errors."""


class ConfigurationError(EIRegionsError):
    """Raised when required configuration is missing or invalid."""


class InvalidPostalCodeError(EIRegionsError):
    """Raised when a postal code is empty after normalisation."""


class StoreError(EIRegionsError):
    """Raised when a read or write against the cache store fails."""


class FetchError(EIRegionsError):
    """Raised when fresh data could not be retrieved from the EI regions site."""


class SourceUnavailableError(FetchError):
    """Transport failure: connection error, timeout or non-2xx status."""


class ExtractionError(FetchError):
    """The page was fetched but held no extractable row."""
