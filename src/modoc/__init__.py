"""modoc - Renderer-agnostic documentation records for compiled modules."""

from modoc.config import RetrieverConfig
from modoc.errors import (
    MissingDocMetadata,
    ModuleUnavailable,
    RetrieverError,
    TypeDocFallbackExhausted,
)
from modoc.json_provider import JsonMetadataProvider
from modoc.metadata import MetadataProvider, ModuleCapabilities
from modoc.models import FunctionRecord, ModuleRecord, TypeRecord
from modoc.retriever import retrieve_modules

__all__ = [
    "FunctionRecord",
    "JsonMetadataProvider",
    "MetadataProvider",
    "MissingDocMetadata",
    "ModuleCapabilities",
    "ModuleRecord",
    "ModuleUnavailable",
    "RetrieverConfig",
    "RetrieverError",
    "TypeDocFallbackExhausted",
    "TypeRecord",
    "retrieve_modules",
]
