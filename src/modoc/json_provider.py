"""Metadata provider backed by a JSON snapshot.

A snapshot holds the introspected metadata of a set of modules:

    {
      "modules": {
        "MyApp.Server": {
          "source": "/src/my_app/lib/server.ex",
          "moduledoc": "A server.",
          "capabilities": {"behaviour_info": false},
          "behaviours": ["GenServer"],
          "functions": [
            {"name": "start", "arity": 2, "line": 12, "kind": "function",
             "args": ["name", {"default": ["opts", []]}], "doc": "Starts it."}
          ],
          "specs": [{"name": "start", "arity": 2, "specs": [...]}],
          "types": [{"kind": "opaque", "name": "state", "value": {"call": "map"}}],
          "type_docs": null,
          "legacy_type_docs": [{"name": "state", "arity": 0, "doc": "State."}],
          "declarations": [
            {"attribute": "module", "line": 1, "value": "MyApp.Server"},
            {"function": "start", "arity": 2, "line": 14}
          ]
        }
      }
    }

Doc values: a string is written documentation, `false` hides the symbol and
`null` (or a missing key) means no documentation. Spec keys of macro-like
symbols use the mangled name and arity. Quoted nodes use the encoding in
`modoc.syntax` and are decoded while the snapshot is validated, so a
malformed node fails with a pydantic ValidationError.

Type docs: `type_docs` (default `[]`) is the primary source and carries
lines. Set it to `null` to mark it unsupported; `legacy_type_docs` (default
`null`, i.e. unsupported) is then used instead, without lines.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any, Literal, Union

from pydantic import AfterValidator, BaseModel, Field, model_validator

from .errors import ModuleUnavailable
from .metadata import (
    HIDDEN,
    UNSET,
    UNSUPPORTED,
    Attribute,
    CallbackDocEntry,
    Declaration,
    DocState,
    Entry,
    FunctionDocEntry,
    Key,
    MetadataProvider,
    ModuleCapabilities,
    Position,
    Present,
    TypeSpecEntry,
    Unsupported,
)
from .syntax import Node, from_json

DocValue = Union[str, bool, None]


def _decode(value: Any) -> Node:
    """Decode a quoted node, reporting every shape error as a ValueError."""
    try:
        return from_json(value)
    except (TypeError, KeyError) as e:
        raise ValueError(f"malformed quoted node {value!r}") from e


# A quoted node, decoded from its JSON form during validation
QuotedNode = Annotated[Any, AfterValidator(_decode)]


def _doc_state(value: DocValue) -> DocState:
    if value is False:
        return HIDDEN
    if isinstance(value, str):
        return Present(value)
    return UNSET


def _relative_path(path: Path, root: Path) -> str:
    """Convert absolute path to relative from project root."""
    try:
        return str(path.relative_to(root))
    except ValueError:
        return str(path)


class PositionModel(BaseModel):
    line: int
    column: int | None = None


class CapabilitiesModel(BaseModel):
    doc_hook: bool = True
    exception_struct: bool = False
    protocol: bool = False
    impl: bool = False
    behaviour_info: bool = False


class FunctionModel(BaseModel):
    name: str
    arity: int = Field(ge=0)
    line: int | None = None
    kind: Literal["function", "macro"] = "function"
    args: list[QuotedNode] = Field(default_factory=list)
    doc: DocValue = None


class CallbackModel(BaseModel):
    name: str
    arity: int = Field(ge=0)
    line: int | None = None
    kind: Literal["callback", "macrocallback"] = "callback"
    doc: DocValue = None


class SpecModel(BaseModel):
    name: str
    arity: int = Field(ge=0)
    specs: list[QuotedNode] = Field(default_factory=list)


class TypeModel(BaseModel):
    kind: Literal["type", "opaque", "typep"] = "type"
    name: str
    args: list[QuotedNode] = Field(default_factory=list)
    value: QuotedNode = Field(default=None, validate_default=True)


class TypeDocModel(BaseModel):
    name: str
    arity: int = Field(ge=0)
    line: int | None = None
    doc: DocValue = None


class DeclarationModel(BaseModel):
    """Either an attribute entry or a function entry, told apart by key.

    A `callback` attribute's value is `[[name, arity], [spec, ...]]` and is
    decoded to `((name, arity), (node, ...))`.
    """

    line: int | PositionModel
    attribute: str | None = None
    value: Any = None
    function: str | None = None
    arity: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_entry(self) -> DeclarationModel:
        if (self.attribute is None) == (self.function is None):
            raise ValueError("declaration needs exactly one of 'attribute' or 'function'")
        if self.function is not None and self.arity is None:
            raise ValueError(f"function declaration {self.function} needs an 'arity'")
        if self.attribute == "callback":
            self.value = _callback_value(self.value)
        return self


def _callback_value(value: Any) -> tuple[Key, tuple[Node, ...]]:
    try:
        (name, arity), specs = value
    except (TypeError, ValueError) as e:
        raise ValueError("callback attribute value must be [[name, arity], [specs]]") from e
    if not isinstance(name, str) or not isinstance(arity, int):
        raise ValueError(f"callback key must be [name, arity], got {[name, arity]!r}")
    return ((name, arity), tuple(_decode(s) for s in specs))


class ModuleModel(BaseModel):
    name: str | None = None  # Printable name, defaults to the identifier
    source: str = ""
    docs_compiled: bool = True
    moduledoc: DocValue = None
    capabilities: CapabilitiesModel = Field(default_factory=CapabilitiesModel)
    functions: list[FunctionModel] = Field(default_factory=list)
    callbacks: list[CallbackModel] = Field(default_factory=list)
    specs: list[SpecModel] = Field(default_factory=list)
    callback_specs: list[SpecModel] = Field(default_factory=list)
    optional_callbacks: list[tuple[str, int]] = Field(default_factory=list)
    behaviours: list[str] = Field(default_factory=list)
    types: list[TypeModel] = Field(default_factory=list)
    type_docs: list[TypeDocModel] | None = Field(default_factory=list)
    legacy_type_docs: list[TypeDocModel] | None = None
    declarations: list[DeclarationModel] = Field(default_factory=list)


class SnapshotModel(BaseModel):
    modules: dict[str, ModuleModel] = Field(default_factory=dict)


def _entry(model: DeclarationModel) -> Entry:
    if isinstance(model.line, PositionModel):
        anno: int | Position = Position(model.line.line, model.line.column)
    else:
        anno = model.line

    if model.function is not None:
        return Declaration(anno, model.function, model.arity)
    return Attribute(anno, model.attribute, model.value)


def _spec_map(models: list[SpecModel]) -> dict[Key, list[Node]]:
    return {(m.name, m.arity): list(m.specs) for m in models}


class JsonMetadataProvider(MetadataProvider):
    """Serves module metadata from a validated snapshot.

    Modules missing from the snapshot are unavailable.
    """

    def __init__(self, snapshot: SnapshotModel):
        self.snapshot = snapshot

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JsonMetadataProvider:
        return cls(SnapshotModel.model_validate(data))

    @classmethod
    def from_path(cls, path: Path | str) -> JsonMetadataProvider:
        """Load a snapshot file.

        Raises:
            pydantic.ValidationError: If the file does not match the schema.
        """
        return cls(SnapshotModel.model_validate_json(Path(path).read_text()))

    def module_ids(self) -> list[str]:
        return list(self.snapshot.modules)

    def _module(self, module: str) -> ModuleModel:
        try:
            return self.snapshot.modules[module]
        except KeyError:
            raise ModuleUnavailable(
                f"module {module} is not in the snapshot", module=module
            ) from None

    def is_available(self, module: str) -> bool:
        return module in self.snapshot.modules

    def capabilities(self, module: str) -> ModuleCapabilities:
        return ModuleCapabilities(**self._module(module).capabilities.model_dump())

    def printable_name(self, module: str) -> str:
        return self._module(module).name or module

    def module_doc(self, module: str):
        m = self._module(module)
        if not m.docs_compiled:
            return UNSUPPORTED
        return _doc_state(m.moduledoc)

    def function_docs(self, module: str) -> list[FunctionDocEntry]:
        return [
            FunctionDocEntry(
                name=f.name,
                arity=f.arity,
                line=f.line,
                kind=f.kind,
                args=tuple(f.args),
                doc=_doc_state(f.doc),
            )
            for f in self._module(module).functions
        ]

    def callback_docs(self, module: str) -> list[CallbackDocEntry]:
        return [
            CallbackDocEntry(c.name, c.arity, c.line, c.kind, _doc_state(c.doc))
            for c in self._module(module).callbacks
        ]

    def specs(self, module: str) -> dict[Key, list[Node]]:
        return _spec_map(self._module(module).specs)

    def callback_specs(self, module: str) -> dict[Key, list[Node]]:
        return _spec_map(self._module(module).callback_specs)

    def optional_callbacks(self, module: str) -> set[Key]:
        return {(name, arity) for name, arity in self._module(module).optional_callbacks}

    def declared_behaviours(self, module: str) -> list[str]:
        return list(self._module(module).behaviours)

    def type_specs(self, module: str) -> list[TypeSpecEntry]:
        return [
            TypeSpecEntry(
                kind=t.kind,
                name=t.name,
                args=tuple(t.args),
                value=t.value,
            )
            for t in self._module(module).types
        ]

    def type_docs_primary(self, module: str) -> dict[Key, tuple[int | None, DocState]] | Unsupported:
        docs = self._module(module).type_docs
        if docs is None:
            return UNSUPPORTED
        return {(d.name, d.arity): (d.line, _doc_state(d.doc)) for d in docs}

    def type_docs_fallback(self, module: str) -> dict[Key, DocState] | Unsupported:
        docs = self._module(module).legacy_type_docs
        if docs is None:
            return UNSUPPORTED
        return {(d.name, d.arity): _doc_state(d.doc) for d in docs}

    def abstract_declarations(self, module: str) -> list[Entry]:
        return [_entry(d) for d in self._module(module).declarations]

    def source_path(self, module: str, source_root: str | None) -> str:
        source = self._module(module).source
        if source_root is None:
            return source
        return _relative_path(Path(source), Path(source_root))
