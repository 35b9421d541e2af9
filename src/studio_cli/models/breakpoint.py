"""Breakpoint table: ordered, named viewport thresholds."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Breakpoint(BaseModel):
    """A named viewport width threshold."""

    model_config = ConfigDict(frozen=True)

    name: str
    min_width: int = Field(ge=0)
    label: str | None = None


class BreakpointSet(BaseModel):
    """An ordered, immutable list of breakpoints with strictly increasing widths."""

    model_config = ConfigDict(frozen=True)

    name: str
    breakpoints: tuple[Breakpoint, ...]

    @model_validator(mode="after")
    def _check_order(self) -> BreakpointSet:
        if not self.breakpoints:
            raise ValueError("A breakpoint set needs at least one breakpoint")
        names = [bp.name for bp in self.breakpoints]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate breakpoint names in '{self.name}'")
        widths = [bp.min_width for bp in self.breakpoints]
        if any(b <= a for a, b in zip(widths, widths[1:])):
            raise ValueError(
                f"Breakpoint widths in '{self.name}' must be strictly increasing"
            )
        return self

    def __len__(self) -> int:
        return len(self.breakpoints)

    def __contains__(self, name: object) -> bool:
        return any(bp.name == name for bp in self.breakpoints)

    @property
    def names(self) -> list[str]:
        return [bp.name for bp in self.breakpoints]

    def get(self, name: str) -> Breakpoint:
        for bp in self.breakpoints:
            if bp.name == name:
                return bp
        raise ValueError(
            f"Unknown breakpoint '{name}'. Expected one of: {', '.join(self.names)}"
        )

    def index(self, name: str) -> int:
        return self.breakpoints.index(self.get(name))

    def up_to(self, name: str) -> list[str]:
        """Names from the smallest breakpoint up to and including *name*."""
        return self.names[: self.index(name) + 1]

    def down_to(self, name: str) -> list[str]:
        """Names from the largest breakpoint down to and including *name*."""
        return list(reversed(self.names[self.index(name):]))

    def for_width(self, width: int) -> Breakpoint:
        """Return the largest breakpoint whose threshold is at or below *width*."""
        if width < 0:
            raise ValueError("Viewport width cannot be negative")
        match = self.breakpoints[0]
        for bp in self.breakpoints:
            if width >= bp.min_width:
                match = bp
        return match

    def max_width(self, name: str) -> int | None:
        """Upper bound (inclusive) of *name*'s range, ``None`` for the last one."""
        idx = self.index(name)
        if idx + 1 >= len(self.breakpoints):
            return None
        return self.breakpoints[idx + 1].min_width - 1

    def media_query(self, name: str, direction: str = "up") -> str:
        """Build a CSS media query for *name* (``up``, ``down`` or ``only``)."""
        bp = self.get(name)
        upper = self.max_width(name)
        if direction == "up":
            return f"@media (min-width: {bp.min_width}px)"
        if direction == "down":
            if upper is None:
                return "@media all"
            return f"@media (max-width: {upper}px)"
        if direction == "only":
            if upper is None:
                return f"@media (min-width: {bp.min_width}px)"
            return f"@media (min-width: {bp.min_width}px) and (max-width: {upper}px)"
        raise ValueError(f"Unknown media query direction '{direction}'")


TAILWIND = BreakpointSet(
    name="tailwind",
    breakpoints=(
        Breakpoint(name="xs", min_width=0, label="Extra small"),
        Breakpoint(name="sm", min_width=640, label="Small"),
        Breakpoint(name="md", min_width=768, label="Medium"),
        Breakpoint(name="lg", min_width=1024, label="Large"),
        Breakpoint(name="xl", min_width=1280, label="Extra large"),
        Breakpoint(name="2xl", min_width=1536, label="2x large"),
    ),
)

DESIGNER = BreakpointSet(
    name="designer",
    breakpoints=(
        Breakpoint(name="mobile", min_width=0, label="Mobile"),
        Breakpoint(name="tablet", min_width=768, label="Tablet"),
        Breakpoint(name="desktop", min_width=1024, label="Desktop"),
    ),
)

BREAKPOINT_SETS: dict[str, BreakpointSet] = {
    TAILWIND.name: TAILWIND,
    DESIGNER.name: DESIGNER,
}


def get_breakpoint_set(name: str) -> BreakpointSet:
    try:
        return BREAKPOINT_SETS[name]
    except KeyError:
        raise ValueError(
            f"Unknown breakpoint set '{name}'. "
            f"Expected one of: {', '.join(BREAKPOINT_SETS)}"
        ) from None
