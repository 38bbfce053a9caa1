"""Documentation records handed to renderers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .metadata import FunctionKind, ModuleKind, TypeKind
from .syntax import Node, render, to_json


@dataclass(frozen=True)
class FunctionRecord:
    """A retained function, macro, callback or macrocallback."""

    id: str  # "name/arity", user-visible arity
    name: str
    arity: int
    kind: FunctionKind
    signature: str | None
    doc: str | None = None
    default_arities: tuple[str, ...] = ()  # e.g. ("bar/1", "bar/2")
    specs: tuple[Node, ...] = ()
    annotations: tuple[str, ...] = ()  # "optional"
    source_location: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "arity": self.arity,
            "kind": self.kind,
            "signature": self.signature,
            "doc": self.doc,
            "default_arities": list(self.default_arities),
            "specs": [render(s) for s in self.specs],
            "spec_asts": [to_json(s) for s in self.specs],
            "annotations": list(self.annotations),
            "source_location": self.source_location,
        }


@dataclass(frozen=True)
class TypeRecord:
    """A public or opaque type. Opaque bodies are already redacted in `spec`."""

    id: str
    name: str
    arity: int
    kind: TypeKind  # "type" | "opaque"
    spec: Node
    signature: str | None
    doc: str | None = None
    source_location: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "arity": self.arity,
            "kind": self.kind,
            "spec": render(self.spec),
            "spec_ast": to_json(self.spec),
            "signature": self.signature,
            "doc": self.doc,
            "source_location": self.source_location,
        }


@dataclass(frozen=True)
class ModuleRecord:
    """Everything documented about one module."""

    id: str  # Printable name without a leading ":" marker
    module: str  # Identifier the module was requested by
    kind: ModuleKind
    summary: str | None = None
    functions: tuple[FunctionRecord, ...] = field(default_factory=tuple)
    types: tuple[TypeRecord, ...] = field(default_factory=tuple)
    source_location: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "module": self.module,
            "kind": self.kind,
            "summary": self.summary,
            "functions": [f.to_dict() for f in self.functions],
            "types": [t.to_dict() for t in self.types],
            "source_location": self.source_location,
        }
