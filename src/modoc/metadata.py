"""Metadata consumed by the retriever.

A MetadataProvider answers introspection queries for compiled modules.
Doc states, declaration-listing entries and raw doc/spec entries are closed
families of frozen dataclasses; the retriever matches on them with isinstance.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Literal, Union

from .syntax import Node

# (name, arity)
Key = tuple[str, int]

FunctionKind = Literal["function", "macro", "callback", "macrocallback"]
TypeKind = Literal["type", "opaque", "typep"]
ModuleKind = Literal["module", "exception", "protocol", "impl", "behaviour"]


# =============================================================================
# DOC STATES
# =============================================================================


@dataclass(frozen=True)
class Present:
    """Documentation was written."""

    text: str


@dataclass(frozen=True)
class Hidden:
    """The author opted the symbol out of documentation."""


@dataclass(frozen=True)
class Unset:
    """No documentation was written, nor explicitly disabled."""


@dataclass(frozen=True)
class Unsupported:
    """The queried documentation source does not exist for this module."""


HIDDEN = Hidden()
UNSET = Unset()
UNSUPPORTED = Unsupported()

DocState = Union[Present, Hidden, Unset]


def doc_text(state: DocState) -> str | None:
    """Return the written text of a doc state, or None."""
    return state.text if isinstance(state, Present) else None


# =============================================================================
# ABSTRACT DECLARATION LISTING
# =============================================================================


@dataclass(frozen=True)
class Position:
    """A rich source position annotation."""

    line: int
    column: int | None = None


Anno = Union[int, Position]


@dataclass(frozen=True)
class Attribute:
    """A module attribute, e.g. `module` or `callback`.

    For `callback` attributes, `value` is `((name, arity), specs)`.
    """

    anno: Anno
    name: str
    value: Any


@dataclass(frozen=True)
class Declaration:
    """A function definition (macros appear under their mangled key)."""

    anno: Anno
    name: str
    arity: int


Entry = Union[Attribute, Declaration]


# =============================================================================
# RAW ENTRIES
# =============================================================================


@dataclass(frozen=True)
class ModuleCapabilities:
    """Capability probes used to classify a module and decide export."""

    doc_hook: bool = True  # The module exposes the documentation hook
    exception_struct: bool = False  # Default struct value carries the exception marker
    protocol: bool = False
    impl: bool = False
    behaviour_info: bool = False


@dataclass(frozen=True)
class FunctionDocEntry:
    name: str
    arity: int
    line: int | None
    kind: FunctionKind  # "function" | "macro"
    args: tuple[Node, ...]
    doc: DocState


@dataclass(frozen=True)
class CallbackDocEntry:
    name: str
    arity: int
    line: int | None
    kind: FunctionKind  # "callback" | "macrocallback"
    doc: DocState


@dataclass(frozen=True)
class TypeSpecEntry:
    kind: TypeKind
    name: str
    args: tuple[Node, ...]
    value: Node

    @property
    def arity(self) -> int:
        return len(self.args)


# =============================================================================
# PROVIDER
# =============================================================================


class MetadataProvider(ABC):
    """Introspection interface over compiled modules.

    Every ordered result must come back in stable declaration order; the
    retriever does not re-sort them.
    """

    @abstractmethod
    def is_available(self, module: str) -> bool: ...

    @abstractmethod
    def capabilities(self, module: str) -> ModuleCapabilities: ...

    def printable_name(self, module: str) -> str:
        """Printable module name. May carry a leading `:` marker."""
        return module

    @abstractmethod
    def module_doc(self, module: str) -> Present | Hidden | Unset | Unsupported: ...

    @abstractmethod
    def function_docs(self, module: str) -> list[FunctionDocEntry]: ...

    @abstractmethod
    def callback_docs(self, module: str) -> list[CallbackDocEntry]: ...

    @abstractmethod
    def specs(self, module: str) -> dict[Key, list[Node]]:
        """Function specs keyed by the mangled (name, arity)."""
        ...

    @abstractmethod
    def callback_specs(self, module: str) -> dict[Key, list[Node]]:
        """Callback specs keyed by the mangled (name, arity)."""
        ...

    @abstractmethod
    def optional_callbacks(self, module: str) -> set[Key]:
        """Optional callbacks declared by the module itself, mangled."""
        ...

    @abstractmethod
    def declared_behaviours(self, module: str) -> list[str]: ...

    @abstractmethod
    def type_specs(self, module: str) -> list[TypeSpecEntry]: ...

    @abstractmethod
    def type_docs_primary(
        self, module: str
    ) -> dict[Key, tuple[int | None, DocState]] | Unsupported: ...

    @abstractmethod
    def type_docs_fallback(self, module: str) -> dict[Key, DocState] | Unsupported: ...

    @abstractmethod
    def abstract_declarations(self, module: str) -> list[Entry]: ...

    @abstractmethod
    def source_path(self, module: str, source_root: str | None) -> str: ...
