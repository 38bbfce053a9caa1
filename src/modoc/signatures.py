"""Display signatures and default-argument arities."""

from __future__ import annotations

from dataclasses import replace

from .syntax import (
    Alternative,
    Annotated,
    Atom,
    Binary,
    Call,
    Default,
    Float,
    Integer,
    ListOf,
    MapOf,
    Node,
    TupleOf,
    Var,
    When,
    render,
)

# Special forms whose argument lists are not meaningful to readers
ALIAS_FORMS = frozenset({"__aliases__", "__block__"})
BARE_FORMS = frozenset({"__ENV__", "__MODULE__", "__DIR__", "__CALLER__", "%", "%{}"})

# Shapes of unnamed arguments and the placeholder each one displays as
_PLACEHOLDERS: tuple[tuple[type, str], ...] = (
    (Binary, "binary"),
    (MapOf, "map"),
    (TupleOf, "tuple"),
    (Integer, "integer"),
    (Float, "float"),
    (ListOf, "list"),
    (Atom, "atom"),
)


def call_signature(name: str, args: tuple[Node, ...] | list[Node]) -> str:
    """Build `name(arg1, arg2)` from a definition's argument list."""
    if name in ALIAS_FORMS:
        return f"{name}(args)"
    if name in BARE_FORMS:
        return name
    return f"{name}({', '.join(render(a) for a in args)})"


def _placeholder(node: Node, index: int) -> str:
    if isinstance(node, Var):
        return node.name
    # A local type such as `integer()` reads as its name
    if isinstance(node, Call) and node.module is None:
        return node.name
    for shape, placeholder in _PLACEHOLDERS:
        if isinstance(node, shape):
            return placeholder
    return f"arg{index}"


def strip_types(args: tuple[Node, ...], arity: int) -> list[str]:
    """Reduce the trailing `arity` spec arguments to display names."""
    trailing = args[max(len(args) - arity, 0) :] if arity > 0 else ()
    names = []
    for index, arg in enumerate(trailing):
        if isinstance(arg, Annotated):
            names.append(_placeholder(arg.left, index))
        elif isinstance(arg, Alternative):
            names.append(f"arg{index}")
        else:
            names.append(_placeholder(arg, index))
    return names


def spec_head(spec: Node) -> Call | None:
    """Find the `name(args)` head of a spec, under `when` and `::` wrappers."""
    if isinstance(spec, When):
        return spec_head(spec.spec)
    if isinstance(spec, Annotated):
        return spec.left if isinstance(spec.left, Call) else None
    if isinstance(spec, Call):
        return spec
    return None


def spec_signature(spec: Node, arity: int) -> str | None:
    """Build a display signature from a type or callback spec.

    Return and argument types are dropped; each argument shows its variable
    name or a placeholder for its shape. None if the spec has no call head.
    """
    head = spec_head(spec)
    if head is None:
        return None
    return f"{head.name}({', '.join(strip_types(head.args, arity))})"


def rename_spec(spec: Node, name: str) -> Node:
    """Rewrite the head of a spec to `name`, keeping everything else."""
    if isinstance(spec, When):
        return replace(spec, spec=rename_spec(spec.spec, name))
    if isinstance(spec, Annotated) and isinstance(spec.left, Call):
        return replace(spec, left=replace(spec.left, name=name))
    if isinstance(spec, Call):
        return replace(spec, name=name)
    return spec


def default_arities(args: tuple[Node, ...] | list[Node], name: str, arity: int) -> tuple[str, ...]:
    """List the lower-arity ids made callable by trailing default arguments.

    `bar/3` with one default yields ("bar/2",); with two, ("bar/1", "bar/2").
    """
    defaults = sum(1 for a in args if isinstance(a, Default))
    if defaults == 0:
        return ()
    return tuple(f"{name}/{n}" for n in range(arity - defaults, arity))
