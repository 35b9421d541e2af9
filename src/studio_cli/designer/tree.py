"""Component tree model: a validated arena of component instances.

Every mutation is computed on a copy of the instance map and published with
a single reference swap while holding the writer lock, so readers (a live
preview, the autosave queue) always observe a complete tree. Published maps
and the instances inside them are never modified in place; changed
instances are replaced by copies.
"""

from __future__ import annotations

import copy
import threading
import uuid
from collections import deque
from collections.abc import Callable, Iterator, Mapping
from types import MappingProxyType
from typing import Any

from studio_cli.designer.registry import ComponentRegistry
from studio_cli.errors import (
    CyclicMove,
    DepthExceeded,
    InstanceNotFound,
    InvalidDesign,
    InvalidParent,
    TooManyChildren,
    TreeError,
    TypeNotAllowed,
)
from studio_cli.logging_config import get_logger
from studio_cli.models.breakpoint import TAILWIND, BreakpointSet, get_breakpoint_set
from studio_cli.models.component import (
    ComponentInstance,
    DesignDocument,
    ResponsiveRule,
    Violation,
)

logger = get_logger(__name__)

MAX_HISTORY = 100

Nodes = dict[str, ComponentInstance]


def _default_id(type_name: str) -> str:
    return f"{type_name}_{uuid.uuid4().hex[:12]}"


def _splice(children: list[str], child_id: str, index: int | None) -> list[str]:
    """Return a copy of *children* with *child_id* inserted at a clamped index."""
    result = list(children)
    if index is None:
        result.append(child_id)
    else:
        result.insert(max(0, min(index, len(result))), child_id)
    return result


def _min_limit(a: int | None, b: int | None) -> int | None:
    if a is None:
        return b
    if b is None:
        return a
    return min(a, b)


class DesignTree:
    """The hierarchy of component instances for one design."""

    def __init__(
        self,
        registry: ComponentRegistry,
        instances: Mapping[str, ComponentInstance],
        root_id: str,
        *,
        name: str | None = None,
        breakpoints: BreakpointSet = TAILWIND,
        id_factory: Callable[[str], str] = _default_id,
        max_history: int = MAX_HISTORY,
    ) -> None:
        if root_id not in instances:
            raise InstanceNotFound(f"Root instance '{root_id}' not found")
        self.registry = registry
        self.name = name
        self.breakpoints = breakpoints
        self.root_id = root_id
        self._id_factory = id_factory
        self._nodes: Nodes = dict(instances)
        self._write_lock = threading.RLock()
        self._undo: deque[Nodes] = deque(maxlen=max_history)
        self._redo: deque[Nodes] = deque(maxlen=max_history)

    # ------------------------------------------------------------------
    # Construction / serialization
    # ------------------------------------------------------------------

    @classmethod
    def new(
        cls,
        registry: ComponentRegistry,
        root_type: str = "container",
        *,
        name: str | None = None,
        breakpoints: BreakpointSet = TAILWIND,
        id_factory: Callable[[str], str] = _default_id,
    ) -> DesignTree:
        """Create a design holding only a root instance of *root_type*."""
        definition = registry.get(root_type)
        constraints = definition.constraints
        if not constraints.can_be_root or not constraints.can_contain_children:
            raise InvalidParent(f"Component type '{root_type}' cannot be a design root")
        root = ComponentInstance(
            id=id_factory(root_type),
            type=root_type,
            props=copy.deepcopy(definition.default_props),
            styles=copy.deepcopy(definition.default_styles),
        )
        return cls(
            registry,
            {root.id: root},
            root.id,
            name=name,
            breakpoints=breakpoints,
            id_factory=id_factory,
        )

    @classmethod
    def from_document(
        cls,
        document: DesignDocument,
        registry: ComponentRegistry,
        *,
        strict: bool = True,
    ) -> DesignTree:
        """Load a design, recomputing depths.

        With *strict* (the default) a document with violations raises
        :class:`InvalidDesign`; otherwise it is loaded as-is for inspection.
        """
        instances = {key: inst.model_copy(deep=True) for key, inst in document.instances.items()}
        for key, inst in instances.items():
            if inst.id != key:
                instances[key] = inst.model_copy(update={"id": key})
        tree = cls(
            registry,
            instances,
            document.root_id,
            name=document.name,
            breakpoints=get_breakpoint_set(document.breakpoints),
        )
        tree._nodes = tree._with_fresh_depths(tree._nodes)
        if strict:
            violations = tree.validate_tree()
            if violations:
                raise InvalidDesign(violations)
        return tree

    def to_document(self) -> DesignDocument:
        nodes = self._nodes
        return DesignDocument(
            name=self.name,
            breakpoints=self.breakpoints.name,
            root_id=self.root_id,
            instances={key: inst.model_copy(deep=True) for key, inst in nodes.items()},
        )

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, instance_id: object) -> bool:
        return instance_id in self._nodes

    def snapshot(self) -> Mapping[str, ComponentInstance]:
        """Read-only view of the currently published tree."""
        return MappingProxyType(self._nodes)

    @property
    def root(self) -> ComponentInstance:
        return self.get(self.root_id)

    def get(self, instance_id: str) -> ComponentInstance:
        node = self._nodes.get(instance_id)
        if node is None:
            raise InstanceNotFound(f"Instance '{instance_id}' not found")
        return node.model_copy(deep=True)

    def ancestors(self, instance_id: str) -> list[str]:
        """Ancestor ids from the parent up to the root."""
        nodes = self._nodes
        if instance_id not in nodes:
            raise InstanceNotFound(f"Instance '{instance_id}' not found")
        return self._chain(nodes, instance_id)

    def descendants(self, instance_id: str) -> list[str]:
        """All descendant ids in document (pre-)order."""
        nodes = self._nodes
        if instance_id not in nodes:
            raise InstanceNotFound(f"Instance '{instance_id}' not found")
        return self._subtree(nodes, instance_id)[1:]

    def path(self, instance_id: str) -> str:
        return "/".join(reversed([instance_id, *self.ancestors(instance_id)]))

    def siblings(self, instance_id: str) -> list[ComponentInstance]:
        nodes = self._nodes
        node = nodes.get(instance_id)
        if node is None:
            raise InstanceNotFound(f"Instance '{instance_id}' not found")
        if node.parent_id is None or node.parent_id not in nodes:
            return []
        return [
            nodes[cid].model_copy(deep=True)
            for cid in nodes[node.parent_id].children
            if cid != instance_id and cid in nodes
        ]

    def walk(self) -> Iterator[ComponentInstance]:
        """Yield instances in document order starting at the root."""
        nodes = self._nodes
        for instance_id in self._subtree(nodes, self.root_id):
            yield nodes[instance_id].model_copy(deep=True)

    def can_place_in_parent(self, type_name: str, parent_type: str) -> bool:
        return self.registry.can_place_in_parent(type_name, parent_type)

    def can_insert(self, parent_id: str, type_name: str) -> bool:
        """Whether ``insert(parent_id, type_name)`` would succeed right now."""
        try:
            self._check_insert(self._nodes, parent_id, type_name)
        except TreeError:
            return False
        return True

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def insert(
        self,
        parent_id: str,
        type_name: str,
        index: int | None = None,
        *,
        props: dict[str, Any] | None = None,
        styles: dict[str, Any] | None = None,
    ) -> ComponentInstance:
        """Create a *type_name* instance under *parent_id* at *index* (default: last)."""
        with self._write_lock:
            nodes = self._nodes
            depth = self._check_insert(nodes, parent_id, type_name)
            definition = self.registry.get(type_name)
            new_id = self._id_factory(type_name)
            if new_id in nodes:
                raise TreeError(f"Id generator produced duplicate id '{new_id}'")
            instance = ComponentInstance(
                id=new_id,
                type=type_name,
                parent_id=parent_id,
                props=copy.deepcopy({**definition.default_props, **(props or {})}),
                styles=copy.deepcopy({**definition.default_styles, **(styles or {})}),
                depth=depth,
            )
            parent = nodes[parent_id]
            updated = dict(nodes)
            updated[parent_id] = parent.model_copy(
                update={"children": _splice(parent.children, new_id, index)},
            )
            updated[new_id] = instance
            self._publish(updated)
        logger.debug(
            "component_inserted",
            instance_id=new_id, type=type_name, parent_id=parent_id, depth=depth,
        )
        return instance.model_copy(deep=True)

    def move(self, instance_id: str, new_parent_id: str, index: int | None = None) -> None:
        """Reparent or reorder *instance_id* (with its subtree)."""
        with self._write_lock:
            nodes = self._nodes
            node = nodes.get(instance_id)
            if node is None:
                raise InstanceNotFound(f"Instance '{instance_id}' not found")
            if node.parent_id is None:
                raise InvalidParent("The root instance cannot be moved")
            new_parent = nodes.get(new_parent_id)
            if new_parent is None:
                raise InvalidParent(f"Parent '{new_parent_id}' does not exist")
            if new_parent_id == instance_id or instance_id in self._chain(nodes, new_parent_id):
                raise CyclicMove(
                    f"Cannot move '{instance_id}' into its own descendant '{new_parent_id}'"
                )
            same_parent = node.parent_id == new_parent_id
            self._check_placement(new_parent, node.type, count_new_child=not same_parent)
            base_depth = self._depth_of(nodes, new_parent_id) + 1
            self._check_subtree_depth(
                nodes, instance_id, base_depth, self._inherited_limit(nodes, new_parent_id),
            )

            updated = dict(nodes)
            old_parent = nodes[node.parent_id]
            remaining = [cid for cid in old_parent.children if cid != instance_id]
            if same_parent:
                updated[old_parent.id] = old_parent.model_copy(
                    update={"children": _splice(remaining, instance_id, index)},
                )
            else:
                updated[old_parent.id] = old_parent.model_copy(update={"children": remaining})
                updated[new_parent_id] = new_parent.model_copy(
                    update={"children": _splice(new_parent.children, instance_id, index)},
                )
            updated[instance_id] = node.model_copy(update={"parent_id": new_parent_id})
            self._refresh_depths(updated, instance_id, base_depth)
            self._publish(updated)
        logger.debug(
            "component_moved",
            instance_id=instance_id, old_parent_id=node.parent_id,
            new_parent_id=new_parent_id, index=index,
        )

    def remove(self, instance_id: str) -> list[str]:
        """Delete *instance_id* and its whole subtree; returns the removed ids."""
        with self._write_lock:
            nodes = self._nodes
            node = nodes.get(instance_id)
            if node is None:
                raise InstanceNotFound(f"Instance '{instance_id}' not found")
            if node.parent_id is None:
                raise InvalidParent("The root instance cannot be removed")
            removed = self._subtree(nodes, instance_id)
            updated = dict(nodes)
            parent = nodes.get(node.parent_id)
            if parent is not None:
                updated[parent.id] = parent.model_copy(
                    update={"children": [cid for cid in parent.children if cid != instance_id]},
                )
            for rid in removed:
                updated.pop(rid, None)
            self._publish(updated)
        logger.debug("component_removed", instance_id=instance_id, removed=len(removed))
        return removed

    def duplicate(self, instance_id: str) -> ComponentInstance:
        """Copy *instance_id* and its subtree right after the original.

        Every copied instance gets a fresh id; props, styles and responsive
        rules are deep copies. Returns the copy of *instance_id*.
        """
        with self._write_lock:
            nodes = self._nodes
            node = nodes.get(instance_id)
            if node is None:
                raise InstanceNotFound(f"Instance '{instance_id}' not found")
            if node.parent_id is None:
                raise InvalidParent("The root instance cannot be duplicated")
            parent = nodes[node.parent_id]
            self._check_placement(parent, node.type, count_new_child=True)
            depth = self._depth_of(nodes, instance_id)
            self._check_subtree_depth(
                nodes, instance_id, depth, self._inherited_limit(nodes, parent.id),
            )

            source_ids = self._subtree(nodes, instance_id)
            new_ids: dict[str, str] = {}
            for source_id in source_ids:
                new_id = self._id_factory(nodes[source_id].type)
                if new_id in nodes or new_id in new_ids.values():
                    raise TreeError(f"Id generator produced duplicate id '{new_id}'")
                new_ids[source_id] = new_id

            updated = dict(nodes)
            for source_id in source_ids:
                source = nodes[source_id]
                updated[new_ids[source_id]] = source.model_copy(
                    deep=True,
                    update={
                        "id": new_ids[source_id],
                        "parent_id": new_ids.get(source.parent_id, source.parent_id),
                        "children": [new_ids[cid] for cid in source.children if cid in new_ids],
                    },
                )
            position = parent.children.index(instance_id) + 1
            updated[parent.id] = parent.model_copy(
                update={"children": _splice(parent.children, new_ids[instance_id], position)},
            )
            self._refresh_depths(updated, new_ids[instance_id], depth)
            self._publish(updated)
            copied = updated[new_ids[instance_id]]
        logger.debug(
            "component_duplicated",
            instance_id=instance_id, copy_id=copied.id, copied=len(source_ids),
        )
        return copied.model_copy(deep=True)

    def update(
        self,
        instance_id: str,
        *,
        props: dict[str, Any] | None = None,
        styles: dict[str, Any] | None = None,
    ) -> ComponentInstance:
        """Shallow-merge property/style edits; a ``None`` value deletes the key."""
        with self._write_lock:
            nodes = self._nodes
            node = nodes.get(instance_id)
            if node is None:
                raise InstanceNotFound(f"Instance '{instance_id}' not found")
            changed = node.model_copy(
                update={
                    "props": _merge(node.props, props),
                    "styles": _merge(node.styles, styles),
                },
            )
            updated = dict(nodes)
            updated[instance_id] = changed
            self._publish(updated)
        return changed.model_copy(deep=True)

    def set_responsive(
        self,
        instance_id: str,
        breakpoint: str,
        rule: ResponsiveRule | dict[str, Any] | None,
    ) -> ComponentInstance:
        """Set or clear (``None``/empty rule) the override for one breakpoint."""
        self.breakpoints.get(breakpoint)
        if isinstance(rule, dict):
            rule = ResponsiveRule.model_validate(rule)
        with self._write_lock:
            nodes = self._nodes
            node = nodes.get(instance_id)
            if node is None:
                raise InstanceNotFound(f"Instance '{instance_id}' not found")
            responsive = {bp: r.model_copy(deep=True) for bp, r in node.responsive.items()}
            if rule is None or rule.is_empty:
                responsive.pop(breakpoint, None)
            else:
                responsive[breakpoint] = rule.model_copy(deep=True)
            # Keep rules in breakpoint order for stable documents
            ordered = {bp: responsive[bp] for bp in self.breakpoints.names if bp in responsive}
            changed = node.model_copy(update={"responsive": ordered})
            updated = dict(nodes)
            updated[instance_id] = changed
            self._publish(updated)
        return changed.model_copy(deep=True)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def undo(self) -> bool:
        with self._write_lock:
            if not self._undo:
                return False
            self._redo.append(self._nodes)
            self._nodes = self._undo.pop()
        return True

    def redo(self) -> bool:
        with self._write_lock:
            if not self._redo:
                return False
            self._undo.append(self._nodes)
            self._nodes = self._redo.pop()
        return True

    # ------------------------------------------------------------------
    # Integrity sweep
    # ------------------------------------------------------------------

    def validate_tree(self) -> list[Violation]:
        """Full integrity check; used on import and recovery paths."""
        nodes = self._nodes
        registry = self.registry
        violations: list[Violation] = []

        def report(code: str, instance_id: str, message: str) -> None:
            violations.append(Violation(code=code, instance_id=instance_id, message=message))  # type: ignore[arg-type]

        root = nodes[self.root_id]
        if root.parent_id is not None:
            report("invalid_root", root.id, f"Root has a parent '{root.parent_id}'")
        root_def = registry.find(root.type)
        if root_def is not None and not root_def.constraints.can_be_root:
            report("invalid_root", root.id, f"Type '{root.type}' cannot be a design root")

        claimed: dict[str, str] = {}
        for node in nodes.values():
            if node.type not in registry:
                report("unknown_type", node.id, f"Unknown component type '{node.type}'")
            if node.parent_id is None and node.id != self.root_id:
                report("multiple_roots", node.id, "Instance has no parent but is not the root")
            elif node.parent_id is not None:
                parent = nodes.get(node.parent_id)
                if parent is None:
                    report("orphan", node.id, f"Parent '{node.parent_id}' does not exist")
                elif node.id not in parent.children:
                    report("orphan", node.id, f"Not listed in children of '{node.parent_id}'")
            seen: set[str] = set()
            for child_id in node.children:
                if child_id in seen:
                    report("duplicate_child", node.id, f"Child '{child_id}' listed twice")
                    continue
                seen.add(child_id)
                child = nodes.get(child_id)
                if child is None:
                    report("dangling_child", node.id, f"Child '{child_id}' does not exist")
                elif child.parent_id != node.id:
                    report(
                        "dangling_child", node.id,
                        f"Child '{child_id}' points at parent '{child.parent_id}'",
                    )
                elif child_id in claimed:
                    report(
                        "duplicate_child", node.id,
                        f"Child '{child_id}' is also listed by '{claimed[child_id]}'",
                    )
                else:
                    claimed[child_id] = node.id

        # Walk from the root; anything revisited is a cycle
        reached: set[str] = set()
        stack: list[tuple[str, int, int | None]] = [(self.root_id, 0, None)]
        while stack:
            node_id, depth, inherited = stack.pop()
            if node_id in reached:
                report("cycle", node_id, "Instance is reachable more than once")
                continue
            reached.add(node_id)
            node = nodes[node_id]
            constraints = registry.get_constraints(node.type)
            limit = _min_limit(inherited, constraints.max_depth)
            if limit is not None and depth > limit:
                report("depth_exceeded", node_id, f"Depth {depth} exceeds max depth {limit}")
            if node.parent_id is not None and node.parent_id in nodes:
                parent_type = nodes[node.parent_id].type
                parent_constraints = registry.get_constraints(parent_type)
                if not parent_constraints.can_contain_children:
                    report(
                        "invalid_parent", node_id,
                        f"Parent type '{parent_type}' cannot contain children",
                    )
                elif node.type in registry and not registry.can_place_in_parent(node.type, parent_type):
                    report(
                        "type_not_allowed", node_id,
                        f"'{node.type}' is not allowed inside '{parent_type}'",
                    )
            if constraints.max_children is not None and len(node.children) > constraints.max_children:
                report(
                    "too_many_children", node_id,
                    f"{len(node.children)} children exceed the limit of {constraints.max_children}",
                )
            for child_id in reversed(list(dict.fromkeys(node.children))):
                child = nodes.get(child_id)
                if child is not None and child.parent_id == node_id:
                    stack.append((child_id, depth + 1, limit))

        for node in nodes.values():
            if node.id in reached:
                continue
            if node.parent_id is not None and node.parent_id in nodes and self._loops(nodes, node.id):
                report("cycle", node.id, "Parent chain loops back on itself")
            elif node.parent_id is not None and node.parent_id in nodes:
                report("orphan", node.id, "Instance is not reachable from the root")
        return violations

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _publish(self, nodes: Nodes) -> None:
        self._undo.append(self._nodes)
        self._redo.clear()
        self._nodes = nodes

    def _check_insert(self, nodes: Mapping[str, ComponentInstance], parent_id: str, type_name: str) -> int:
        parent = nodes.get(parent_id)
        if parent is None:
            raise InvalidParent(f"Parent '{parent_id}' does not exist")
        definition = self.registry.get(type_name)
        self._check_placement(parent, type_name, count_new_child=True)
        depth = self._depth_of(nodes, parent_id) + 1
        limit = _min_limit(self._inherited_limit(nodes, parent_id), definition.constraints.max_depth)
        if limit is not None and depth > limit:
            raise DepthExceeded(
                f"Placing '{type_name}' at depth {depth} exceeds max depth {limit}"
            )
        return depth

    def _check_placement(
        self, parent: ComponentInstance, type_name: str, *, count_new_child: bool,
    ) -> None:
        registry = self.registry
        parent_constraints = registry.get_constraints(parent.type)
        if not parent_constraints.can_contain_children:
            raise InvalidParent(f"'{parent.type}' instance '{parent.id}' cannot contain children")
        if not registry.can_place_in_parent(type_name, parent.type):
            raise TypeNotAllowed(f"'{type_name}' is not allowed inside '{parent.type}'")
        limit = parent_constraints.max_children
        if count_new_child and limit is not None and len(parent.children) >= limit:
            raise TooManyChildren(
                f"'{parent.type}' instance '{parent.id}' already has {limit} children"
            )

    def _check_subtree_depth(
        self,
        nodes: Mapping[str, ComponentInstance],
        instance_id: str,
        depth: int,
        inherited: int | None,
    ) -> None:
        stack = [(instance_id, depth, inherited)]
        while stack:
            node_id, node_depth, limit = stack.pop()
            node = nodes[node_id]
            limit = _min_limit(limit, self.registry.get_constraints(node.type).max_depth)
            if limit is not None and node_depth > limit:
                raise DepthExceeded(
                    f"'{node.type}' instance '{node_id}' would sit at depth "
                    f"{node_depth}, exceeding max depth {limit}"
                )
            stack.extend((cid, node_depth + 1, limit) for cid in node.children if cid in nodes)

    def _inherited_limit(self, nodes: Mapping[str, ComponentInstance], instance_id: str) -> int | None:
        """Most restrictive max depth among *instance_id* and its ancestors."""
        limit: int | None = None
        for node_id in [instance_id, *self._chain(nodes, instance_id)]:
            limit = _min_limit(limit, self.registry.get_constraints(nodes[node_id].type).max_depth)
        return limit

    @staticmethod
    def _chain(nodes: Mapping[str, ComponentInstance], instance_id: str) -> list[str]:
        chain: list[str] = []
        seen = {instance_id}
        parent_id = nodes[instance_id].parent_id
        while parent_id is not None and parent_id in nodes and parent_id not in seen:
            chain.append(parent_id)
            seen.add(parent_id)
            parent_id = nodes[parent_id].parent_id
        return chain

    @staticmethod
    def _loops(nodes: Mapping[str, ComponentInstance], instance_id: str) -> bool:
        seen = {instance_id}
        parent_id = nodes[instance_id].parent_id
        while parent_id is not None and parent_id in nodes:
            if parent_id in seen:
                return True
            seen.add(parent_id)
            parent_id = nodes[parent_id].parent_id
        return False

    def _depth_of(self, nodes: Mapping[str, ComponentInstance], instance_id: str) -> int:
        return len(self._chain(nodes, instance_id))

    @staticmethod
    def _subtree(nodes: Mapping[str, ComponentInstance], instance_id: str) -> list[str]:
        order: list[str] = []
        seen: set[str] = set()
        stack = [instance_id]
        while stack:
            node_id = stack.pop()
            if node_id in seen or node_id not in nodes:
                continue
            seen.add(node_id)
            order.append(node_id)
            stack.extend(reversed(nodes[node_id].children))
        return order

    def _refresh_depths(self, nodes: Nodes, instance_id: str, depth: int) -> None:
        stack = [(instance_id, depth)]
        while stack:
            node_id, node_depth = stack.pop()
            node = nodes[node_id]
            if node.depth != node_depth:
                nodes[node_id] = node.model_copy(update={"depth": node_depth})
            stack.extend((cid, node_depth + 1) for cid in node.children if cid in nodes)

    def _with_fresh_depths(self, nodes: Nodes) -> Nodes:
        updated = dict(nodes)
        for node_id in self._subtree(updated, self.root_id):
            expected = self._depth_of(updated, node_id)
            if updated[node_id].depth != expected:
                updated[node_id] = updated[node_id].model_copy(update={"depth": expected})
        return updated


def _merge(base: dict[str, Any], changes: dict[str, Any] | None) -> dict[str, Any]:
    result = copy.deepcopy(base)
    for key, value in (changes or {}).items():
        if value is None:
            result.pop(key, None)
        else:
            result[key] = copy.deepcopy(value)
    return result
