"""Type records: public and opaque types with their docs."""

from __future__ import annotations

import logging

from .errors import TypeDocFallbackExhausted
from .locator import SourceLocator
from .metadata import UNSET, DocState, Key, MetadataProvider, TypeSpecEntry, Unsupported, doc_text
from .models import TypeRecord
from .signatures import spec_signature
from .syntax import Annotated, Call, Node

log = logging.getLogger(__name__)


def type_docs(provider: MetadataProvider, module: str) -> dict[Key, tuple[int | None, DocState]]:
    """Fetch type docs, falling back to the legacy source (which has no lines).

    Raises:
        TypeDocFallbackExhausted: If neither source is supported for the module.
    """
    primary = provider.type_docs_primary(module)
    if not isinstance(primary, Unsupported):
        return primary

    fallback = provider.type_docs_fallback(module)
    if isinstance(fallback, Unsupported):
        raise TypeDocFallbackExhausted(
            f"module {module} has no type documentation source", module=module
        )
    return {key: (None, doc) for key, doc in fallback.items()}


def type_ast(entry: TypeSpecEntry) -> Node:
    """Build the displayed spec. Opaque types keep only their `name(args)` head."""
    head = Call(entry.name, entry.args)
    if entry.kind == "opaque":
        return head
    return Annotated(head, entry.value)


def type_records(
    provider: MetadataProvider, module: str, locator: SourceLocator
) -> list[TypeRecord]:
    """Assemble records for every non-private type, sorted by (name, arity)."""
    try:
        docs = type_docs(provider, module)
    except TypeDocFallbackExhausted as e:
        log.warning(f"{e}; types are left undocumented")
        docs = {}

    records = []
    for entry in provider.type_specs(module):
        if entry.kind == "typep":
            continue
        spec = type_ast(entry)
        line, doc = docs.get((entry.name, entry.arity), (None, UNSET))
        records.append(
            TypeRecord(
                id=f"{entry.name}/{entry.arity}",
                name=entry.name,
                arity=entry.arity,
                kind=entry.kind,
                spec=spec,
                doc=doc_text(doc),
                signature=spec_signature(spec, entry.arity),
                source_location=locator.link(line),
            )
        )

    records.sort(key=lambda r: (r.name, r.arity))
    return records
