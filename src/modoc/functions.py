"""Function, macro and callback records."""

from __future__ import annotations

from .callbacks import CallbackIndex, mangle
from .locator import SourceLocator
from .metadata import CallbackDocEntry, FunctionDocEntry, Hidden, Key, ModuleKind, Unset, doc_text
from .models import FunctionRecord
from .signatures import call_signature, default_arities, rename_spec, spec_signature
from .syntax import Node

# Dispatch helpers generated for every protocol
PROTOCOL_HELPERS = frozenset({"impl_for", "impl_for!"})

OPTIONAL = "optional"


def is_documented(entry: FunctionDocEntry, module_kind: ModuleKind) -> bool:
    """Decide whether a function or macro appears in the documentation.

    Excluded: protocol dispatch helpers, symbols whose docs are hidden, and
    underscore-prefixed symbols with no doc written. Everything else is kept,
    documented or not.
    """
    if module_kind == "protocol" and entry.name in PROTOCOL_HELPERS:
        return False
    if isinstance(entry.doc, Hidden):
        return False
    if isinstance(entry.doc, Unset) and entry.name.startswith("_"):
        return False
    return True


def implementation_doc(behaviour: str, name: str, arity: int) -> str:
    return f"Callback implementation for `c:{behaviour}.{name}/{arity}`."


def function_record(
    entry: FunctionDocEntry,
    locator: SourceLocator,
    callbacks: CallbackIndex,
    specs: dict[Key, list[Node]],
) -> FunctionRecord:
    key = mangle(entry.name, entry.arity, entry.kind)
    line = locator.line("function", key, fallback=entry.line)

    doc = doc_text(entry.doc)
    behaviour = callbacks.origin_of(key)
    if doc is None and behaviour is not None:
        doc = implementation_doc(behaviour, entry.name, entry.arity)

    return FunctionRecord(
        id=f"{entry.name}/{entry.arity}",
        name=entry.name,
        arity=entry.arity,
        kind=entry.kind,
        signature=call_signature(entry.name, entry.args),
        doc=doc,
        default_arities=default_arities(entry.args, entry.name, entry.arity),
        specs=tuple(rename_spec(s, entry.name) for s in reversed(specs.get(key, []))),
        source_location=locator.link(line),
    )


def callback_record(
    entry: CallbackDocEntry, locator: SourceLocator, callbacks: CallbackIndex
) -> FunctionRecord:
    key = mangle(entry.name, entry.arity, entry.kind)
    line = locator.line("callback", key, fallback=entry.line)
    specs = tuple(rename_spec(s, entry.name) for s in callbacks.specs.get(key, []))

    return FunctionRecord(
        id=f"{entry.name}/{entry.arity}",
        name=entry.name,
        arity=entry.arity,
        kind=entry.kind,
        signature=spec_signature(specs[0], entry.arity) if specs else None,
        doc=doc_text(entry.doc),
        specs=specs,
        annotations=(OPTIONAL,) if key in callbacks.optional else (),
        source_location=locator.link(line),
    )


def function_records(
    entries: list[FunctionDocEntry],
    module_kind: ModuleKind,
    locator: SourceLocator,
    callbacks: CallbackIndex,
    specs: dict[Key, list[Node]],
) -> list[FunctionRecord]:
    """Records for functions and macros, then callbacks for behaviours.

    Both groups keep the order the provider declared them in.
    """
    records = [
        function_record(entry, locator, callbacks, specs)
        for entry in entries
        if is_documented(entry, module_kind)
    ]
    if module_kind == "behaviour":
        records.extend(callback_record(entry, locator, callbacks) for entry in callbacks.docs)
    return records
