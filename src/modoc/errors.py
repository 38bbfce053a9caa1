"""Exceptions raised while retrieving module documentation."""

from __future__ import annotations


class RetrieverError(Exception):
    """Base exception for retrieval operations."""

    def __init__(self, message: str, module: str | None = None):
        super().__init__(message)
        self.module = module


class ModuleUnavailable(RetrieverError):
    """Raised when a requested module cannot be loaded. Aborts the batch."""

    pass


class MissingDocMetadata(RetrieverError):
    """Raised when a module was never compiled with documentation support."""

    pass


class TypeDocFallbackExhausted(RetrieverError):
    """Raised when neither type-doc source is available for a module.

    Not fatal: the type assembler catches it and leaves type docs absent.
    """

    pass
