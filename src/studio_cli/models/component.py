"""Pydantic models for component definitions, instances, and design documents."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class Constraints(BaseModel):
    """Placement constraints of a component type.

    ``None`` for ``allowed_parents``/``allowed_children``/``max_depth``/
    ``max_children`` means unrestricted.
    """

    model_config = ConfigDict(frozen=True)

    can_contain_children: bool = False
    max_depth: int | None = Field(default=None, ge=0)
    allowed_parents: frozenset[str] | None = None
    allowed_children: frozenset[str] | None = None
    max_children: int | None = Field(default=None, ge=0)
    can_be_root: bool = False


class ComponentDefinition(BaseModel):
    """A registered component type: defaults plus placement constraints."""

    model_config = ConfigDict(frozen=True)

    type: str
    name: str = ""
    category: str = "basic"
    description: str | None = None
    default_props: dict[str, Any] = Field(default_factory=dict)
    default_styles: dict[str, Any] = Field(default_factory=dict)
    constraints: Constraints = Field(default_factory=Constraints)


class ResponsiveRule(BaseModel):
    """Sparse per-breakpoint override; unset fields inherit."""

    props: dict[str, Any] | None = None
    styles: dict[str, Any] | None = None
    visible: bool | None = None

    @property
    def is_empty(self) -> bool:
        return not self.props and not self.styles and self.visible is None


class ComponentInstance(BaseModel):
    """One node of a design's component tree."""

    id: str
    type: str
    parent_id: str | None = None
    children: list[str] = Field(default_factory=list)
    props: dict[str, Any] = Field(default_factory=dict)
    styles: dict[str, Any] = Field(default_factory=dict)
    responsive: dict[str, ResponsiveRule] = Field(default_factory=dict)
    # Derived from the parent chain; recomputed on every structural change
    depth: int = 0


class DesignDocument(BaseModel):
    """Serialized form of a design (one JSON file per design)."""

    version: str = "1.0.0"
    name: str | None = None
    breakpoints: str = "tailwind"
    root_id: str
    instances: dict[str, ComponentInstance]


class Violation(BaseModel):
    """A tree integrity problem reported by ``DesignTree.validate_tree``."""

    code: Literal[
        "unknown_type",
        "orphan",
        "dangling_child",
        "duplicate_child",
        "cycle",
        "depth_exceeded",
        "invalid_parent",
        "type_not_allowed",
        "too_many_children",
        "multiple_roots",
        "invalid_root",
    ]
    instance_id: str
    message: str

    def __str__(self) -> str:
        return f"[{self.code}] {self.instance_id}: {self.message}"


class ResponsiveConflict(BaseModel):
    """Advisory authoring conflict between breakpoint rules."""

    type: Literal["visibility_conflict", "style_conflict", "layout_conflict"]
    severity: Literal["warning", "error"]
    instance_id: str
    breakpoints: list[str]
    message: str
    suggestion: str | None = None


class ResolvedStyle(BaseModel):
    """Effective props/styles/visibility of an instance at one breakpoint."""

    instance_id: str
    breakpoint: str
    props: dict[str, Any] = Field(default_factory=dict)
    styles: dict[str, Any] = Field(default_factory=dict)
    visible: bool = True
