"""Tests for the component registry."""

import pytest

from studio_cli.designer.registry import ComponentRegistry
from studio_cli.errors import UnknownComponentType
from studio_cli.models.component import ComponentDefinition, Constraints


class TestComponentRegistry:
    def test_default_catalog(self, registry):
        assert registry.types == ["button", "col", "container", "image", "input", "row", "text"]
        assert [d.type for d in registry.by_category("layout")] == ["col", "container", "row"]

    def test_get_unknown(self, registry):
        assert registry.find("slider") is None
        with pytest.raises(UnknownComponentType, match="slider"):
            registry.get("slider")

    def test_unregistered_constraints_are_unrestricted(self, registry):
        c = registry.get_constraints("slider")
        assert c.can_contain_children is True
        assert c.allowed_parents is None
        assert c.max_depth is None

    def test_register_overwrites(self):
        registry = ComponentRegistry()
        registry.register(ComponentDefinition(type="card", name="Card"))
        registry.register(ComponentDefinition(type="card", name="Fancy card"))
        assert len(registry) == 1
        assert registry.get("card").name == "Fancy card"

    @pytest.mark.parametrize(
        ("child", "parent", "allowed"),
        [
            ("button", "container", True),
            ("button", "col", True),
            ("col", "row", True),
            ("button", "row", False),  # row only takes columns
            ("text", "button", False),  # leaves hold nothing
            ("row", "container", True),
            ("slider", "container", False),  # unregistered child
        ],
    )
    def test_can_place_in_parent(self, registry, child, parent, allowed):
        assert registry.can_place_in_parent(child, parent) is allowed

    def test_allowed_parents_restricts(self):
        registry = ComponentRegistry(
            [
                ComponentDefinition(
                    type="panel", constraints=Constraints(can_contain_children=True),
                ),
                ComponentDefinition(
                    type="tab",
                    constraints=Constraints(allowed_parents=frozenset({"tabs"})),
                ),
            ]
        )
        assert not registry.can_place_in_parent("tab", "panel")

    def test_defaults_are_frozen(self, registry):
        definition = registry.get("button")
        assert definition.default_props["text"] == "Button"
        assert definition.constraints.can_contain_children is False
