"""Component registry: type name to defaults and placement constraints.

Registration happens at startup; afterwards the registry is read-only and
is consulted by the design tree on every mutation.
"""

from __future__ import annotations

from studio_cli.errors import UnknownComponentType
from studio_cli.models.component import ComponentDefinition, Constraints

GRID_COLUMNS = 12

LAYOUT_PARENTS = frozenset({"container", "row", "col"})

_BASIC = Constraints(
    can_contain_children=False,
    max_depth=10,
    allowed_parents=LAYOUT_PARENTS,
)


class ComponentRegistry:
    """Maps component type names to their :class:`ComponentDefinition`."""

    def __init__(self, definitions: list[ComponentDefinition] | None = None) -> None:
        self._definitions: dict[str, ComponentDefinition] = {}
        for definition in definitions or []:
            self.register(definition)

    def __contains__(self, type_name: object) -> bool:
        return type_name in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)

    def register(self, definition: ComponentDefinition) -> None:
        """Add or overwrite the definition of ``definition.type``."""
        self._definitions[definition.type] = definition

    def find(self, type_name: str) -> ComponentDefinition | None:
        return self._definitions.get(type_name)

    def get(self, type_name: str) -> ComponentDefinition:
        definition = self._definitions.get(type_name)
        if definition is None:
            raise UnknownComponentType(f"Unknown component type '{type_name}'")
        return definition

    def get_constraints(self, type_name: str) -> Constraints:
        """Constraints of *type_name*; unregistered types are unrestricted."""
        definition = self._definitions.get(type_name)
        if definition is None:
            return Constraints(can_contain_children=True)
        return definition.constraints

    @property
    def types(self) -> list[str]:
        return sorted(self._definitions)

    def by_category(self, category: str) -> list[ComponentDefinition]:
        return [
            d for _, d in sorted(self._definitions.items()) if d.category == category
        ]

    def can_place_in_parent(self, type_name: str, parent_type: str) -> bool:
        """Whether *type_name* may be a direct child of *parent_type*.

        Checks the parent's ability to hold children, the child's
        ``allowed_parents`` and the parent's ``allowed_children``. Depth and
        child-count limits depend on the concrete tree and are not checked.
        """
        if type_name not in self._definitions:
            return False
        parent = self.get_constraints(parent_type)
        if not parent.can_contain_children:
            return False
        child = self.get_constraints(type_name)
        if child.allowed_parents is not None and parent_type not in child.allowed_parents:
            return False
        if parent.allowed_children is not None and type_name not in parent.allowed_children:
            return False
        return True


def default_definitions() -> list[ComponentDefinition]:
    """The stock component catalog (layout containers plus basic leaves)."""
    content_types = frozenset({"container", "row", "col", "button", "input", "text", "image"})
    return [
        ComponentDefinition(
            type="container",
            name="Container",
            category="layout",
            description="Generic container that can hold other components",
            default_props={"direction": "column", "gap": 0},
            default_styles={"width": "100%"},
            constraints=Constraints(
                can_contain_children=True,
                max_depth=5,
                allowed_parents=LAYOUT_PARENTS,
                allowed_children=content_types,
                max_children=50,
                can_be_root=True,
            ),
        ),
        ComponentDefinition(
            type="row",
            name="Row",
            category="layout",
            description="Horizontal row that holds grid columns",
            default_props={"gap": 16, "justify": "start"},
            default_styles={"width": "100%"},
            constraints=Constraints(
                can_contain_children=True,
                max_depth=5,
                allowed_parents=LAYOUT_PARENTS,
                allowed_children=frozenset({"col"}),
                max_children=GRID_COLUMNS,
            ),
        ),
        ComponentDefinition(
            type="col",
            name="Column",
            category="layout",
            description="Grid column spanning part of a row",
            default_props={"span": GRID_COLUMNS},
            constraints=Constraints(
                can_contain_children=True,
                max_depth=5,
                allowed_parents=LAYOUT_PARENTS,
                allowed_children=content_types,
                max_children=20,
            ),
        ),
        ComponentDefinition(
            type="button",
            name="Button",
            description="Clickable button",
            default_props={"text": "Button", "variant": "primary", "size": "md"},
            constraints=_BASIC,
        ),
        ComponentDefinition(
            type="input",
            name="Input",
            description="Text input field",
            default_props={"type": "text", "placeholder": "Enter a value"},
            constraints=_BASIC,
        ),
        ComponentDefinition(
            type="text",
            name="Text",
            description="Static text block",
            default_props={"content": "Text", "variant": "body", "size": "base"},
            constraints=_BASIC,
        ),
        ComponentDefinition(
            type="image",
            name="Image",
            description="Image with alt text",
            default_props={"src": "", "alt": "", "width": 300, "height": 200},
            constraints=_BASIC,
        ),
    ]


def default_registry() -> ComponentRegistry:
    return ComponentRegistry(default_definitions())
