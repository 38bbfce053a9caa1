"""Quoted expression nodes for argument lists and type specifications.

Every argument list, spec and type body handed over by a metadata provider is
a tree of the node classes below. The family is closed: code that inspects
nodes dispatches on these classes only.

JSON encoding, read from snapshots and written as the `*_ast` fields of records:

    "x"                                   Var("x")
    1 / 1.5                               Integer(1) / Float(1.5)
    [a, b]                                ListOf((a, b))
    true / false / null                   Atom("true") / Atom("false") / Atom("nil")
    {"atom": "ok"}                        Atom("ok")
    {"binary": [...]}                     Binary(...)
    {"tuple": [...]}                      TupleOf(...)
    {"map": [[k, v], ...]}                MapOf(...)
    {"call": "t", "args": [...],
     "module": "String"}                  Call("t", (...), module="String")
    {"annotated": [l, r]}                 Annotated(l, r)
    {"union": [l, r]}                     Alternative(l, r)
    {"default": [arg, value]}             Default(arg, value)
    {"when": spec, "constraints":
     [["name", type], ...]}               When(spec, (("name", type), ...))
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Var:
    name: str


@dataclass(frozen=True)
class Atom:
    value: str


@dataclass(frozen=True)
class Integer:
    value: int


@dataclass(frozen=True)
class Float:
    value: float


@dataclass(frozen=True)
class Binary:
    segments: tuple[Node, ...] = ()


@dataclass(frozen=True)
class ListOf:
    items: tuple[Node, ...] = ()


@dataclass(frozen=True)
class TupleOf:
    items: tuple[Node, ...] = ()


@dataclass(frozen=True)
class MapOf:
    pairs: tuple[tuple[Node, Node], ...] = ()


@dataclass(frozen=True)
class Call:
    """A local (`name(args)`) or remote (`module.name(args)`) call."""

    name: str
    args: tuple[Node, ...] = ()
    module: str | None = None


@dataclass(frozen=True)
class Annotated:
    """`left :: right`. Also the return arrow of a spec."""

    left: Node
    right: Node


@dataclass(frozen=True)
class Alternative:
    """`left | right`."""

    left: Node
    right: Node


@dataclass(frozen=True)
class Default:
    """A parameter with a default value: `arg \\\\ value`."""

    arg: Node
    value: Node


@dataclass(frozen=True)
class When:
    """A spec with type-variable constraints: `spec when name: type`."""

    spec: Node
    constraints: tuple[tuple[str, Node], ...] = ()


Node = Union[
    Var,
    Atom,
    Integer,
    Float,
    Binary,
    ListOf,
    TupleOf,
    MapOf,
    Call,
    Annotated,
    Alternative,
    Default,
    When,
]

# Atoms that display without the leading colon
_BARE_ATOMS = frozenset({"nil", "true", "false"})
_PLAIN_ATOM = re.compile(r"[A-Za-z_][A-Za-z0-9_@]*[?!]?")


def _atom(value: str) -> str:
    if value in _BARE_ATOMS:
        return value
    if _PLAIN_ATOM.fullmatch(value):
        return f":{value}"
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f':"{escaped}"'


def _float(value: float) -> str:
    # Exponent form keeps a fractional mantissa: 1.0e16, not 1e+16
    text = repr(value)
    if "e" not in text:
        return text
    mantissa, exponent = text.split("e")
    if "." not in mantissa:
        mantissa += ".0"
    return f"{mantissa}e{int(exponent)}"


def _join(nodes) -> str:
    return ", ".join(render(n) for n in nodes)


def render(node: Node) -> str:
    """Render a node as display text."""
    if isinstance(node, Var):
        return node.name
    if isinstance(node, Atom):
        return _atom(node.value)
    if isinstance(node, Integer):
        return str(node.value)
    if isinstance(node, Float):
        return _float(node.value)
    if isinstance(node, Binary):
        return f"<<{_join(node.segments)}>>"
    if isinstance(node, ListOf):
        return f"[{_join(node.items)}]"
    if isinstance(node, TupleOf):
        return f"{{{_join(node.items)}}}"
    if isinstance(node, MapOf):
        pairs = ", ".join(f"{render(k)} => {render(v)}" for k, v in node.pairs)
        return f"%{{{pairs}}}"
    if isinstance(node, Call):
        prefix = f"{node.module}." if node.module else ""
        return f"{prefix}{node.name}({_join(node.args)})"
    if isinstance(node, Annotated):
        return f"{render(node.left)} :: {render(node.right)}"
    if isinstance(node, Alternative):
        return f"{render(node.left)} | {render(node.right)}"
    if isinstance(node, Default):
        return f"{render(node.arg)} \\\\ {render(node.value)}"
    if isinstance(node, When):
        constraints = ", ".join(f"{name}: {render(t)}" for name, t in node.constraints)
        return f"{render(node.spec)} when {constraints}"
    raise TypeError(f"Not a quoted node: {node!r}")


def from_json(value: Any) -> Node:
    """Decode a JSON value into a node (see module docstring)."""
    # bool before int: JSON booleans decode to Python bool, a subclass of int
    if value is None:
        return Atom("nil")
    if isinstance(value, bool):
        return Atom("true" if value else "false")
    if isinstance(value, int):
        return Integer(value)
    if isinstance(value, float):
        return Float(value)
    if isinstance(value, str):
        return Var(value)
    if isinstance(value, list):
        return ListOf(tuple(from_json(v) for v in value))
    if not isinstance(value, dict):
        raise ValueError(f"Cannot decode quoted node from {value!r}")

    if "var" in value:
        return Var(value["var"])
    if "atom" in value:
        return Atom(value["atom"])
    if "binary" in value:
        return Binary(tuple(from_json(v) for v in value["binary"]))
    if "tuple" in value:
        return TupleOf(tuple(from_json(v) for v in value["tuple"]))
    if "map" in value:
        return MapOf(tuple((from_json(k), from_json(v)) for k, v in value["map"]))
    if "call" in value:
        return Call(
            value["call"],
            tuple(from_json(v) for v in value.get("args", [])),
            module=value.get("module"),
        )
    if "annotated" in value:
        left, right = value["annotated"]
        return Annotated(from_json(left), from_json(right))
    if "union" in value:
        left, right = value["union"]
        return Alternative(from_json(left), from_json(right))
    if "default" in value:
        arg, default = value["default"]
        return Default(from_json(arg), from_json(default))
    if "when" in value:
        return When(
            from_json(value["when"]),
            tuple((name, from_json(t)) for name, t in value.get("constraints", [])),
        )
    raise ValueError(f"Unknown quoted node tag in {sorted(value)}")


def to_json(node: Node) -> Any:
    """Encode a node as a JSON-compatible value. Inverse of from_json."""
    if isinstance(node, Var):
        return node.name
    if isinstance(node, Atom):
        if node.value == "nil":
            return None
        if node.value in ("true", "false"):
            return node.value == "true"
        return {"atom": node.value}
    if isinstance(node, (Integer, Float)):
        return node.value
    if isinstance(node, Binary):
        return {"binary": [to_json(n) for n in node.segments]}
    if isinstance(node, ListOf):
        return [to_json(n) for n in node.items]
    if isinstance(node, TupleOf):
        return {"tuple": [to_json(n) for n in node.items]}
    if isinstance(node, MapOf):
        return {"map": [[to_json(k), to_json(v)] for k, v in node.pairs]}
    if isinstance(node, Call):
        encoded = {"call": node.name, "args": [to_json(n) for n in node.args]}
        if node.module:
            encoded["module"] = node.module
        return encoded
    if isinstance(node, Annotated):
        return {"annotated": [to_json(node.left), to_json(node.right)]}
    if isinstance(node, Alternative):
        return {"union": [to_json(node.left), to_json(node.right)]}
    if isinstance(node, Default):
        return {"default": [to_json(node.arg), to_json(node.value)]}
    if isinstance(node, When):
        return {
            "when": to_json(node.spec),
            "constraints": [[name, to_json(t)] for name, t in node.constraints],
        }
    raise TypeError(f"Not a quoted node: {node!r}")
