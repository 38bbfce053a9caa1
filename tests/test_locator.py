"""
Source line resolution over the declaration listing, and link templating.
"""

from modoc.locator import SourceLocator, anno_line, find_line, source_link
from modoc.metadata import Attribute, Declaration, Position
from modoc.syntax import Call

ENTRIES = [
    Attribute(1, "file", "lib/foo.ex"),
    Attribute(Position(2, 1), "module", "Foo"),
    Attribute(4, "callback", (("init", 1), (Call("init"),))),
    Attribute(6, "callback", (("MACRO-log", 2), ())),
    Declaration(10, "start", 1),
    Declaration(Position(14, 3), "MACRO-trace", 2),
    Declaration(20, "start", 1),
]


class TestFindLine:
    """Linear scan for the first matching entry."""

    def test_module(self):
        assert find_line(ENTRIES, "module", "Foo") == 2

    def test_function(self):
        assert find_line(ENTRIES, "function", ("start", 1)) == 10

    def test_first_match_wins(self):
        assert find_line(ENTRIES, "function", ("start", 1)) != 20

    def test_mangled_macro(self):
        assert find_line(ENTRIES, "function", ("MACRO-trace", 2)) == 14

    def test_callback(self):
        assert find_line(ENTRIES, "callback", ("init", 1)) == 4
        assert find_line(ENTRIES, "callback", ("MACRO-log", 2)) == 6

    def test_kinds_do_not_cross(self):
        assert find_line(ENTRIES, "function", ("init", 1)) is None
        assert find_line(ENTRIES, "callback", ("start", 1)) is None
        assert find_line(ENTRIES, "module", "lib/foo.ex") is None

    def test_no_match(self):
        assert find_line(ENTRIES, "module", "Bar") is None
        assert find_line([], "function", ("start", 1)) is None

    def test_anno_line(self):
        assert anno_line(7) == 7
        assert anno_line(Position(8, 2)) == 8


class TestSourceLink:
    def test_substitutes_path_and_line(self):
        url = source_link("lib/foo.ex", "https://x.test/%{path}#L%{line}", 12)
        assert url == "https://x.test/lib/foo.ex#L12"

    def test_no_pattern_no_link(self):
        assert source_link("lib/foo.ex", None, 12) is None

    def test_missing_line(self):
        assert source_link("lib/foo.ex", "%{path}:%{line}", None) == "lib/foo.ex:"


class TestSourceLocator:
    def test_fallback_line(self):
        locator = SourceLocator(entries=tuple(ENTRIES), source_path="lib/foo.ex")
        assert locator.line("function", ("stop", 0), fallback=33) == 33
        assert locator.line("function", ("start", 1), fallback=33) == 10

    def test_link_without_pattern(self):
        locator = SourceLocator(entries=(), source_path="lib/foo.ex")
        assert locator.link(5) is None
