"""Module retrieval: classify, assemble and collect module records."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable

from .callbacks import build_callback_index
from .config import RetrieverConfig
from .errors import MissingDocMetadata, ModuleUnavailable
from .functions import function_records
from .locator import SourceLocator
from .metadata import Hidden, MetadataProvider, ModuleCapabilities, ModuleKind, Unsupported, doc_text
from .models import ModuleRecord
from .typespecs import type_records

log = logging.getLogger(__name__)


def detect_kind(capabilities: ModuleCapabilities) -> ModuleKind:
    """Classify a module. The first matching probe wins."""
    if capabilities.exception_struct:
        return "exception"
    if capabilities.protocol:
        return "protocol"
    if capabilities.impl:
        return "impl"
    if capabilities.behaviour_info:
        return "behaviour"
    return "module"


def module_id(printable_name: str) -> str:
    """Strip the leading `:` marker some module names print with."""
    return printable_name[1:] if printable_name.startswith(":") else printable_name


def exports_docs(provider: MetadataProvider, module: str, config: RetrieverConfig) -> bool:
    """Whether a module exports documentation.

    Bootstrap modules, modules without the documentation hook and modules
    whose root doc is hidden export nothing.

    Raises:
        MissingDocMetadata: If the module was compiled without doc support.
    """
    if module in config.bootstrap_modules:
        return False
    if not provider.capabilities(module).doc_hook:
        return False

    state = provider.module_doc(module)
    if isinstance(state, Unsupported):
        raise MissingDocMetadata(
            f"module {module} was not compiled with documentation support", module=module
        )
    return not isinstance(state, Hidden)


def build_module(
    provider: MetadataProvider, module: str, kind: ModuleKind, config: RetrieverConfig
) -> ModuleRecord:
    """Assemble the record for a module known to export docs."""
    locator = SourceLocator(
        entries=tuple(provider.abstract_declarations(module)),
        source_path=provider.source_path(module, config.source_root),
        url_pattern=config.source_url_pattern,
    )
    # Callback origins must be known before function docs can be synthesised
    callbacks = build_callback_index(provider, module)
    functions = function_records(
        provider.function_docs(module), kind, locator, callbacks, provider.specs(module)
    )
    types = type_records(provider, module, locator)

    record = ModuleRecord(
        id=module_id(provider.printable_name(module)),
        module=module,
        kind=kind,
        summary=doc_text(provider.module_doc(module)),
        functions=tuple(functions),
        types=tuple(types),
        source_location=locator.link(locator.line("module", module)),
    )
    log.debug(
        f"Assembled {record.id} ({kind}): {len(functions)} functions, {len(types)} types"
    )
    return record


def get_module(
    provider: MetadataProvider, module: str, config: RetrieverConfig
) -> ModuleRecord | None:
    """Retrieve one module, or None if it exports no documentation.

    Raises:
        ModuleUnavailable: If the module cannot be loaded.
        MissingDocMetadata: If the module was compiled without doc support.
    """
    if not provider.is_available(module):
        raise ModuleUnavailable(f"module {module} is not defined/available", module=module)

    kind = detect_kind(provider.capabilities(module))
    if not exports_docs(provider, module, config):
        log.debug(f"Skipping {module}: no documentation exported")
        return None
    return build_module(provider, module, kind, config)


def retrieve_modules(
    modules: Iterable[str],
    provider: MetadataProvider,
    config: RetrieverConfig | None = None,
) -> list[ModuleRecord]:
    """Retrieve documentation records for `modules`, sorted by id.

    Modules are extracted in parallel. Any fatal error aborts the whole
    batch; no partial result is returned.

    Args:
        modules: Module identifiers; duplicates are retrieved once
        provider: Metadata source for the modules and their behaviours
        config: Source link settings (default: no links)

    Returns:
        One ModuleRecord per module that exports documentation

    Raises:
        ModuleUnavailable: If any module cannot be loaded.
        MissingDocMetadata: If any module was compiled without doc support.
    """
    config = config or RetrieverConfig()
    unique = list(dict.fromkeys(modules))
    if not unique:
        return []

    executor = ThreadPoolExecutor(max_workers=min(config.max_workers, len(unique)))
    try:
        futures = [executor.submit(get_module, provider, m, config) for m in unique]
        results = [f.result() for f in futures]
    except Exception:
        executor.shutdown(wait=False, cancel_futures=True)
        raise
    executor.shutdown()

    records = sorted((r for r in results if r is not None), key=lambda r: r.id)
    log.debug(f"Retrieved {len(records)} of {len(unique)} modules")
    return records
