"""In-memory metadata provider for tests - builds modules field by field."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from modoc.metadata import (
    UNSET,
    UNSUPPORTED,
    CallbackDocEntry,
    FunctionDocEntry,
    MetadataProvider,
    ModuleCapabilities,
    Present,
    TypeSpecEntry,
)
from modoc.syntax import Var


def fn(name, arity, *args, doc=UNSET, kind="function", line=None):
    """FunctionDocEntry with plain variable args unless given explicitly."""
    if not args:
        args = tuple(Var(f"arg{i}") for i in range(arity))
    if isinstance(doc, str):
        doc = Present(doc)
    return FunctionDocEntry(name, arity, line, kind, tuple(args), doc)


def cb(name, arity, doc=UNSET, kind="callback", line=None):
    if isinstance(doc, str):
        doc = Present(doc)
    return CallbackDocEntry(name, arity, line, kind, doc)


def typespec(name, *args, value, kind="type"):
    return TypeSpecEntry(kind, name, tuple(args), value)


@dataclass
class FakeModule:
    name: str | None = None
    source: str = "/src/lib/module.ex"
    capabilities: ModuleCapabilities = field(default_factory=ModuleCapabilities)
    moduledoc: object = UNSET
    functions: list = field(default_factory=list)
    callbacks: list = field(default_factory=list)
    specs: dict = field(default_factory=dict)
    callback_specs: dict = field(default_factory=dict)
    optional_callbacks: set = field(default_factory=set)
    behaviours: list = field(default_factory=list)
    types: list = field(default_factory=list)
    type_docs: object = field(default_factory=dict)
    legacy_type_docs: object = UNSUPPORTED
    declarations: list = field(default_factory=list)


class FakeProvider(MetadataProvider):
    """
    MetadataProvider over FakeModule objects.

    Example:
        provider = FakeProvider()
        provider.add("Foo", moduledoc=Present("Foo docs"), functions=[fn("bar", 1)])
    """

    def __init__(self):
        self.modules: dict[str, FakeModule] = {}

    def add(self, module: str, **fields) -> FakeModule:
        self.modules[module] = FakeModule(**fields)
        return self.modules[module]

    def is_available(self, module):
        return module in self.modules

    def capabilities(self, module):
        return self.modules[module].capabilities

    def printable_name(self, module):
        return self.modules[module].name or module

    def module_doc(self, module):
        return self.modules[module].moduledoc

    def function_docs(self, module):
        return list(self.modules[module].functions)

    def callback_docs(self, module):
        return list(self.modules[module].callbacks)

    def specs(self, module):
        return dict(self.modules[module].specs)

    def callback_specs(self, module):
        return dict(self.modules[module].callback_specs)

    def optional_callbacks(self, module):
        return set(self.modules[module].optional_callbacks)

    def declared_behaviours(self, module):
        return list(self.modules[module].behaviours)

    def type_specs(self, module):
        return list(self.modules[module].types)

    def type_docs_primary(self, module):
        return self.modules[module].type_docs

    def type_docs_fallback(self, module):
        return self.modules[module].legacy_type_docs

    def abstract_declarations(self, module):
        return list(self.modules[module].declarations)

    def source_path(self, module, source_root):
        source = Path(self.modules[module].source)
        if source_root is None:
            return str(source)
        try:
            return str(source.relative_to(source_root))
        except ValueError:
            return str(source)
