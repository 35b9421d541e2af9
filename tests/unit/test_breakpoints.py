"""Tests for breakpoint sets."""

import pytest
from pydantic import ValidationError

from studio_cli.models.breakpoint import (
    DESIGNER,
    TAILWIND,
    Breakpoint,
    BreakpointSet,
    get_breakpoint_set,
)


class TestBreakpointSet:
    def test_tailwind_order(self):
        assert TAILWIND.names == ["xs", "sm", "md", "lg", "xl", "2xl"]
        assert [bp.min_width for bp in TAILWIND.breakpoints] == [0, 640, 768, 1024, 1280, 1536]

    def test_index_and_contains(self):
        assert TAILWIND.index("md") == 2
        assert "lg" in TAILWIND
        assert "tablet" not in TAILWIND
        assert len(DESIGNER) == 3

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown breakpoint 'huge'"):
            TAILWIND.index("huge")

    def test_up_to_and_down_to(self):
        assert TAILWIND.up_to("md") == ["xs", "sm", "md"]
        assert TAILWIND.down_to("xl") == ["2xl", "xl"]
        assert DESIGNER.down_to("mobile") == ["desktop", "tablet", "mobile"]

    @pytest.mark.parametrize(
        ("width", "name"),
        [(0, "xs"), (639, "xs"), (640, "sm"), (1023, "md"), (1024, "lg"), (5000, "2xl")],
    )
    def test_for_width(self, width, name):
        assert TAILWIND.for_width(width).name == name

    def test_negative_width(self):
        with pytest.raises(ValueError):
            TAILWIND.for_width(-1)

    def test_media_queries(self):
        assert TAILWIND.media_query("md") == "@media (min-width: 768px)"
        assert TAILWIND.media_query("md", "down") == "@media (max-width: 1023px)"
        assert TAILWIND.media_query("md", "only") == "@media (min-width: 768px) and (max-width: 1023px)"
        assert TAILWIND.media_query("2xl", "only") == "@media (min-width: 1536px)"
        with pytest.raises(ValueError):
            TAILWIND.media_query("md", "sideways")

    def test_widths_must_increase(self):
        with pytest.raises(ValidationError, match="strictly increasing"):
            BreakpointSet(
                name="bad",
                breakpoints=(Breakpoint(name="a", min_width=0), Breakpoint(name="b", min_width=0)),
            )

    def test_names_must_be_unique(self):
        with pytest.raises(ValidationError, match="Duplicate"):
            BreakpointSet(
                name="bad",
                breakpoints=(Breakpoint(name="a", min_width=0), Breakpoint(name="a", min_width=10)),
            )

    def test_empty_set(self):
        with pytest.raises(ValidationError):
            BreakpointSet(name="bad", breakpoints=())

    def test_immutable(self):
        with pytest.raises(ValidationError):
            TAILWIND.name = "other"

    def test_lookup_by_name(self):
        assert get_breakpoint_set("designer") is DESIGNER
        with pytest.raises(ValueError, match="Unknown breakpoint set"):
            get_breakpoint_set("bootstrap")
