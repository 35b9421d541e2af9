"""Tests for the responsive resolver."""

from __future__ import annotations

import pytest

from studio_cli.designer.responsive import ResponsiveResolver
from studio_cli.models.breakpoint import DESIGNER
from studio_cli.models.component import ComponentInstance, ResponsiveRule


def _instance(type_name: str = "text", iid: str = "n1", **responsive: dict) -> ComponentInstance:
    return ComponentInstance(
        id=iid,
        type=type_name,
        props={"size": "base", "span": 12} if type_name == "col" else {"size": "base"},
        styles={"width": "100%", "color": "black"},
        responsive={bp: ResponsiveRule.model_validate(rule) for bp, rule in responsive.items()},
    )


@pytest.fixture
def resolver() -> ResponsiveResolver:
    return ResponsiveResolver()


class TestResolve:
    def test_base_only(self, resolver):
        resolved = resolver.resolve(_instance(), "xl")
        assert resolved.props == {"size": "base"}
        assert resolved.styles == {"width": "100%", "color": "black"}
        assert resolved.visible is True

    def test_mobile_first_cascade(self, resolver):
        inst = _instance(
            sm={"styles": {"width": "50%"}},
            lg={"styles": {"color": "red"}, "props": {"size": "lg"}},
        )
        assert resolver.resolve(inst, "xs").styles["width"] == "100%"
        assert resolver.resolve(inst, "md").styles == {"width": "50%", "color": "black"}
        xl = resolver.resolve(inst, "xl")
        assert xl.styles == {"width": "50%", "color": "red"}
        assert xl.props == {"size": "lg"}

    def test_desktop_first_cascade(self):
        resolver = ResponsiveResolver(mobile_first=False)
        inst = _instance(
            sm={"styles": {"width": "50%"}},
            lg={"styles": {"width": "25%"}},
        )
        assert resolver.resolve(inst, "2xl").styles["width"] == "100%"
        assert resolver.resolve(inst, "md").styles["width"] == "25%"
        assert resolver.resolve(inst, "xs").styles["width"] == "50%"

    def test_visibility_nearest_declaration(self, resolver):
        inst = _instance(sm={"visible": False}, lg={"visible": True})
        assert resolver.resolve(inst, "xs").visible is True
        assert resolver.resolve(inst, "md").visible is False
        assert resolver.resolve(inst, "2xl").visible is True

    def test_resolve_is_pure(self, resolver):
        inst = _instance(md={"props": {"size": "sm"}})
        before = inst.model_copy(deep=True)
        first = resolver.resolve(inst, "lg")
        first.props["size"] = "mutated"
        assert resolver.resolve(inst, "lg").props["size"] == "sm"
        assert inst == before

    def test_unknown_breakpoint(self, resolver):
        with pytest.raises(ValueError):
            resolver.resolve(_instance(), "tablet")

    def test_designer_set(self):
        resolver = ResponsiveResolver(DESIGNER)
        inst = _instance(tablet={"styles": {"width": "50%"}})
        assert resolver.resolve(inst, "desktop").styles["width"] == "50%"
        assert resolver.breakpoint_for_width(800) == "tablet"

    def test_resolve_all(self, resolver):
        resolved = resolver.resolve_all(_instance(md={"visible": False}))
        assert list(resolved) == ["xs", "sm", "md", "lg", "xl", "2xl"]
        assert [r.visible for r in resolved.values()] == [True, True, False, False, False, False]


class TestConflicts:
    def test_visibility_conflict_on_adjacent(self, resolver):
        conflicts = resolver.validate_responsive_config(
            _instance(sm={"visible": True}, md={"visible": False})
        )
        assert [(c.type, c.severity, c.breakpoints) for c in conflicts] == [
            ("visibility_conflict", "warning", ["sm", "md"])
        ]

    def test_visibility_non_adjacent_ignored(self, resolver):
        inst = _instance(sm={"visible": True}, lg={"visible": False})
        assert resolver.validate_responsive_config(inst) == []

    def test_fixed_width_conflict(self, resolver):
        inst = _instance(md={"styles": {"width": "300px"}}, lg={"styles": {"width": "50%"}})
        [conflict] = resolver.validate_responsive_config(inst)
        assert conflict.type == "style_conflict"
        assert conflict.breakpoints == ["md", "lg"]

    def test_percentage_widths_ok(self, resolver):
        inst = _instance(md={"styles": {"width": "30%"}}, lg={"styles": {"width": "50%"}})
        assert resolver.validate_responsive_config(inst) == []

    def test_equal_widths_ok(self, resolver):
        inst = _instance(md={"styles": {"width": 300}}, lg={"styles": {"width": 300}})
        assert resolver.validate_responsive_config(inst) == []

    def test_grid_overflow(self, resolver):
        col = _instance("col", "a", md={"props": {"span": 8}})
        sibling = _instance("col", "b", md={"props": {"span": 6}})
        conflicts = resolver.validate_responsive_config(col, [sibling])
        assert [(c.type, c.severity, c.breakpoints) for c in conflicts] == [
            ("layout_conflict", "error", ["md"]),
        ]

    def test_grid_within_limit(self, resolver):
        col = _instance("col", "a", md={"props": {"span": 6}})
        sibling = _instance("col", "b", md={"props": {"span": 6}})
        assert resolver.validate_responsive_config(col, [sibling]) == []

    def test_grid_only_checked_where_span_declared(self, resolver):
        # Base spans of 12 + 12 overflow everywhere, but only md declares a span
        col = _instance("col", "a", md={"props": {"span": 4}})
        sibling = _instance("col", "b")
        [conflict] = resolver.validate_responsive_config(col, [sibling])
        assert conflict.breakpoints == ["md"]
        assert "16" in conflict.message

    def test_grid_ignores_non_columns_and_self(self, resolver):
        col = _instance("col", "a", md={"props": {"span": 6}})
        others = [col, _instance("text", "t", md={"props": {"span": 12}})]
        assert resolver.validate_responsive_config(col, others) == []

    def test_hidden_columns_do_not_count(self, resolver):
        col = _instance("col", "a", md={"props": {"span": 8}})
        hidden = _instance("col", "b", md={"props": {"span": 8}, "visible": False})
        assert resolver.validate_responsive_config(col, [hidden]) == []

    def test_non_grid_types_skip_layout(self, resolver):
        text = _instance("text", md={"props": {"span": 20}})
        assert resolver.validate_responsive_config(text) == []


class TestDuplicates:
    def test_repeated_rule(self, resolver):
        inst = _instance(
            sm={"styles": {"width": "50%"}},
            md={"styles": {"width": "50%"}},
            xl={"styles": {"width": "50%"}},
        )
        assert resolver.find_duplicate_rules(inst) == ["md", "xl"]

    def test_distinct_rules(self, resolver):
        inst = _instance(sm={"visible": False}, md={"visible": True})
        assert resolver.find_duplicate_rules(inst) == []
