"""Responsive resolver: breakpoint cascade and authoring conflict checks.

The resolver is stateless; every method is a pure function of its inputs.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable
from typing import Any

from studio_cli.designer.registry import GRID_COLUMNS
from studio_cli.models.breakpoint import TAILWIND, BreakpointSet
from studio_cli.models.component import (
    ComponentInstance,
    ResolvedStyle,
    ResponsiveConflict,
    ResponsiveRule,
)

GRID_TYPES = frozenset({"col"})


def _is_percentage(value: Any) -> bool:
    return isinstance(value, str) and value.strip().endswith("%")


def _as_span(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return GRID_COLUMNS


class ResponsiveResolver:
    """Resolves instance overrides against an ordered breakpoint set."""

    def __init__(
        self,
        breakpoints: BreakpointSet = TAILWIND,
        *,
        mobile_first: bool = True,
        grid_types: frozenset[str] = GRID_TYPES,
    ) -> None:
        self.breakpoints = breakpoints
        self.mobile_first = mobile_first
        self.grid_types = grid_types

    def cascade(self, breakpoint: str) -> list[str]:
        """Breakpoints whose rules apply at *breakpoint*, in application order."""
        if self.mobile_first:
            return self.breakpoints.up_to(breakpoint)
        return self.breakpoints.down_to(breakpoint)

    def breakpoint_for_width(self, width: int) -> str:
        return self.breakpoints.for_width(width).name

    def resolve(self, instance: ComponentInstance, breakpoint: str) -> ResolvedStyle:
        props = copy.deepcopy(instance.props)
        styles = copy.deepcopy(instance.styles)
        visible = True
        for name in self.cascade(breakpoint):
            rule = instance.responsive.get(name)
            if rule is None:
                continue
            if rule.props:
                props.update(copy.deepcopy(rule.props))
            if rule.styles:
                styles.update(copy.deepcopy(rule.styles))
            if rule.visible is not None:
                visible = rule.visible
        return ResolvedStyle(
            instance_id=instance.id,
            breakpoint=breakpoint,
            props=props,
            styles=styles,
            visible=visible,
        )

    def resolve_all(self, instance: ComponentInstance) -> dict[str, ResolvedStyle]:
        return {name: self.resolve(instance, name) for name in self.breakpoints.names}

    def validate_responsive_config(
        self,
        instance: ComponentInstance,
        siblings: Iterable[ComponentInstance] = (),
    ) -> list[ResponsiveConflict]:
        """Report authoring conflicts; nothing is raised or corrected."""
        conflicts: list[ResponsiveConflict] = []
        names = self.breakpoints.names
        rules = instance.responsive

        for lower, upper in zip(names, names[1:]):
            a, b = rules.get(lower), rules.get(upper)
            if a is None or b is None:
                continue
            if a.visible is not None and b.visible is not None and a.visible != b.visible:
                conflicts.append(
                    ResponsiveConflict(
                        type="visibility_conflict",
                        severity="warning",
                        instance_id=instance.id,
                        breakpoints=[lower, upper],
                        message=(
                            f"Visibility flips between '{lower}' and '{upper}' "
                            f"({a.visible} -> {b.visible})"
                        ),
                        suggestion="Check that the component should toggle visibility here",
                    )
                )
            width_a = (a.styles or {}).get("width")
            width_b = (b.styles or {}).get("width")
            if (
                width_a is not None
                and width_b is not None
                and width_a != width_b
                and not (_is_percentage(width_a) and _is_percentage(width_b))
            ):
                conflicts.append(
                    ResponsiveConflict(
                        type="style_conflict",
                        severity="warning",
                        instance_id=instance.id,
                        breakpoints=[lower, upper],
                        message=f"Fixed width changes from {width_a} to {width_b}",
                        suggestion="Consider relative units for responsive widths",
                    )
                )

        if instance.type in self.grid_types:
            conflicts.extend(self._grid_conflicts(instance, siblings))
        return conflicts

    def _grid_conflicts(
        self,
        instance: ComponentInstance,
        siblings: Iterable[ComponentInstance],
    ) -> list[ResponsiveConflict]:
        columns = [instance] + [
            s for s in siblings if s.type in self.grid_types and s.id != instance.id
        ]
        conflicts: list[ResponsiveConflict] = []
        for name in self.breakpoints.names:
            declared = any(
                "span" in (rule.props or {})
                for column in columns
                if (rule := column.responsive.get(name)) is not None
            )
            if not declared:
                continue
            total = 0
            for column in columns:
                resolved = self.resolve(column, name)
                if resolved.visible:
                    total += _as_span(resolved.props.get("span", GRID_COLUMNS))
            if total > GRID_COLUMNS:
                conflicts.append(
                    ResponsiveConflict(
                        type="layout_conflict",
                        severity="error",
                        instance_id=instance.id,
                        breakpoints=[name],
                        message=(
                            f"Column spans total {total} at '{name}', "
                            f"exceeding the {GRID_COLUMNS}-column grid"
                        ),
                        suggestion="Reduce column spans or wrap columns into a new row",
                    )
                )
        return conflicts

    def find_duplicate_rules(self, instance: ComponentInstance) -> list[str]:
        """Breakpoints whose rule repeats the previously declared one."""
        order = self.breakpoints.names if self.mobile_first else list(reversed(self.breakpoints.names))
        duplicates: list[str] = []
        previous: ResponsiveRule | None = None
        for name in order:
            rule = instance.responsive.get(name)
            if rule is None:
                continue
            if previous is not None and rule == previous:
                duplicates.append(name)
            previous = rule
        return duplicates
