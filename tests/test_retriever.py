"""
Module classification, assembly and batch retrieval.
"""

import json

import pytest
from modoc import MissingDocMetadata, ModuleUnavailable, RetrieverConfig, retrieve_modules
from modoc.metadata import HIDDEN, UNSUPPORTED, Attribute, ModuleCapabilities, Present
from modoc.retriever import detect_kind, get_module, module_id
from modoc.syntax import Call, Var

from tests.helpers import cb, fn, typespec


class TestDetectKind:
    """First matching capability probe wins."""

    def test_plain_module(self):
        assert detect_kind(ModuleCapabilities()) == "module"

    def test_exception_beats_everything(self):
        caps = ModuleCapabilities(exception_struct=True, protocol=True, behaviour_info=True)
        assert detect_kind(caps) == "exception"

    def test_protocol_before_impl(self):
        assert detect_kind(ModuleCapabilities(protocol=True, impl=True)) == "protocol"

    def test_impl_before_behaviour(self):
        assert detect_kind(ModuleCapabilities(impl=True, behaviour_info=True)) == "impl"

    def test_behaviour(self):
        assert detect_kind(ModuleCapabilities(behaviour_info=True)) == "behaviour"


class TestModuleId:
    def test_strips_leading_marker(self):
        assert module_id(":gen_server") == "gen_server"

    def test_plain_name_unchanged(self):
        assert module_id("MyApp.Server") == "MyApp.Server"

    def test_strips_only_one_marker(self):
        assert module_id("::odd") == ":odd"


class TestGetModule:
    def test_assembles_record(self, provider, config):
        provider.add(
            "Foo",
            source="/src/lib/foo.ex",
            moduledoc=Present("Foo things."),
            functions=[fn("bar", 1, doc="Bars.")],
            types=[typespec("t", value=Call("integer"))],
            declarations=[Attribute(3, "module", "Foo")],
        )

        record = get_module(provider, "Foo", config)

        assert record.id == "Foo"
        assert record.kind == "module"
        assert record.summary == "Foo things."
        assert [f.id for f in record.functions] == ["bar/1"]
        assert [t.id for t in record.types] == ["t/0"]
        assert record.source_location == "https://example.com/blob/main/lib/foo.ex#L3"

    def test_undocumented_module_still_exported(self, provider, config):
        provider.add("Foo")
        assert get_module(provider, "Foo", config).summary is None

    def test_printable_name_marker_stripped(self, provider, config):
        provider.add("lists", name=":lists")
        assert get_module(provider, "lists", config).id == "lists"

    def test_no_source_links_without_pattern(self, provider):
        provider.add("Foo", functions=[fn("bar", 0, line=4)])
        record = get_module(provider, "Foo", RetrieverConfig())

        assert record.source_location is None
        assert record.functions[0].source_location is None

    def test_behaviour_module_lists_callbacks(self, provider, config):
        provider.add(
            "B",
            capabilities=ModuleCapabilities(behaviour_info=True),
            functions=[fn("helper", 0)],
            callbacks=[cb("init", 1, doc="Initialises.")],
            callback_specs={("init", 1): [Call("init", (Var("args"),))]},
        )
        record = get_module(provider, "B", config)

        assert record.kind == "behaviour"
        assert [(f.id, f.kind) for f in record.functions] == [
            ("helper/0", "function"),
            ("init/1", "callback"),
        ]

    def test_implementation_doc_references_behaviour(self, provider, config):
        provider.add("B", callback_specs={("init", 1): []})
        provider.add("M", behaviours=["B"], functions=[fn("init", 1)])

        [init] = get_module(provider, "M", config).functions

        assert "B.init/1" in init.doc

    def test_hidden_module_doc_skips_module(self, provider, config):
        provider.add("Foo", moduledoc=HIDDEN)
        assert get_module(provider, "Foo", config) is None

    def test_module_without_doc_hook_skipped(self, provider, config):
        provider.add("Foo", capabilities=ModuleCapabilities(doc_hook=False), moduledoc=UNSUPPORTED)
        assert get_module(provider, "Foo", config) is None

    def test_bootstrap_module_skipped(self, provider, config):
        provider.add("elixir_bootstrap", moduledoc=UNSUPPORTED)
        assert get_module(provider, "elixir_bootstrap", config) is None

    def test_missing_doc_metadata_raises(self, provider, config):
        provider.add("Foo", moduledoc=UNSUPPORTED)
        with pytest.raises(MissingDocMetadata, match="Foo"):
            get_module(provider, "Foo", config)

    def test_unavailable_raises(self, provider, config):
        with pytest.raises(ModuleUnavailable) as exc:
            get_module(provider, "Nope", config)
        assert exc.value.module == "Nope"


class TestRetrieveModules:
    """Batch behaviour: ordering, skipping and fail-fast errors."""

    def test_sorted_unique_ids(self, provider, config):
        for name in ("Zed", "Alpha", "Mid"):
            provider.add(name)

        records = retrieve_modules(["Zed", "Alpha", "Mid", "Alpha"], provider, config)
        ids = [r.id for r in records]

        assert ids == ["Alpha", "Mid", "Zed"]
        assert len(set(ids)) == len(ids)

    def test_skipped_modules_absent(self, provider, config):
        provider.add("Foo")
        provider.add("NoHook", capabilities=ModuleCapabilities(doc_hook=False))

        assert [r.id for r in retrieve_modules(["NoHook", "Foo"], provider, config)] == ["Foo"]

    def test_unavailable_module_aborts_batch(self, provider, config):
        provider.add("Foo")
        with pytest.raises(ModuleUnavailable):
            retrieve_modules(["Foo", "Missing"], provider, config)

    def test_missing_doc_metadata_aborts_batch(self, provider, config):
        provider.add("Foo")
        provider.add("Bar", moduledoc=UNSUPPORTED)
        with pytest.raises(MissingDocMetadata):
            retrieve_modules(["Foo", "Bar"], provider, config)

    def test_empty_input(self, provider, config):
        assert retrieve_modules([], provider, config) == []

    def test_single_worker(self, provider):
        provider.add("B")
        provider.add("A")
        records = retrieve_modules(["B", "A"], provider, RetrieverConfig(max_workers=1))
        assert [r.id for r in records] == ["A", "B"]

    def test_deterministic(self, provider, config):
        provider.add("B", callback_specs={("init", 1): []})
        provider.add(
            "M",
            moduledoc=Present("M."),
            behaviours=["B"],
            functions=[fn("init", 1), fn("run", 2, doc="Runs.")],
            types=[typespec("t", Var("x"), value=Call("list", (Var("x"),)), kind="opaque")],
        )

        def dump():
            records = retrieve_modules(["M", "B"], provider, config)
            return json.dumps([r.to_dict() for r in records], sort_keys=True)

        assert dump() == dump()
