"""Behaviour and callback resolution.

Macros and macrocallbacks are compiled under a mangled key: `foo/n` becomes
`MACRO-foo/(n+1)`, the extra leading argument being the caller environment.
Lookups into provider metadata use the mangled key; records expose the
user-visible name and arity.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .metadata import CallbackDocEntry, Key, MetadataProvider
from .syntax import Node

log = logging.getLogger(__name__)

MACRO_PREFIX = "MACRO-"
_MACRO_KINDS = frozenset({"macro", "macrocallback"})


def mangle(name: str, arity: int, kind: str) -> Key:
    """Return the key a symbol is compiled under."""
    if kind in _MACRO_KINDS:
        return (f"{MACRO_PREFIX}{name}", arity + 1)
    return (name, arity)


def callbacks_defined_by(provider: MetadataProvider, behaviour: str) -> list[Key]:
    """Keys of every callback a behaviour declares. Empty if it cannot be loaded."""
    if not provider.is_available(behaviour):
        log.debug(f"Behaviour {behaviour} unavailable; its callbacks are not resolved")
        return []
    return list(provider.callback_specs(behaviour))


def callback_origins(provider: MetadataProvider, module: str) -> dict[Key, str]:
    """Map each callback key the module implements to its declaring behaviour.

    If two behaviours declare the same key, the one declared last wins.
    """
    origins: dict[Key, str] = {}
    for behaviour in provider.declared_behaviours(module):
        for key in callbacks_defined_by(provider, behaviour):
            origins[key] = behaviour
    return origins


@dataclass(frozen=True)
class CallbackIndex:
    """Callback metadata of one module, gathered before any record is built."""

    origins: dict[Key, str] = field(default_factory=dict)
    optional: frozenset[Key] = frozenset()
    specs: dict[Key, list[Node]] = field(default_factory=dict)
    docs: tuple[CallbackDocEntry, ...] = ()

    def origin_of(self, key: Key) -> str | None:
        return self.origins.get(key)


def build_callback_index(provider: MetadataProvider, module: str) -> CallbackIndex:
    return CallbackIndex(
        origins=callback_origins(provider, module),
        optional=frozenset(provider.optional_callbacks(module)),
        specs=dict(provider.callback_specs(module)),
        docs=tuple(provider.callback_docs(module)),
    )
