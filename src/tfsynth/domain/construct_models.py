from __future__ import annotations

"""
Construct Tree Data Models.

Provides the recursive node structure used by the builder to accumulate
declared infrastructure: apps own uniquely named stacks, stacks own a tree
of construct nodes, and leaf nodes carry a block kind, a type tag and a
property mapping. References let one node point at an attribute of another.
"""

import hashlib
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Union

from tfsynth.domain.constants import (
    BLOCK_DATA,
    DEFAULT_OUTPUT_DIR,
    LOGICAL_ID_HASH_LENGTH,
    LOGICAL_ID_SEPARATOR,
    PATH_SEPARATOR,
    REFERENCEABLE_KINDS,
)
from tfsynth.domain.errors import InvalidPropertyError

# Recursive property value accepted by the builder
PropertyValue = Union[
    None, bool, int, float, str, "Reference", List[Any], Dict[str, Any]
]
Properties = Dict[str, PropertyValue]

# -----------------------------------------------------------------------------
# LIFECYCLE
# -----------------------------------------------------------------------------

class StackState(str, Enum):
    """Linear lifecycle of a stack: EMPTY -> BUILDING -> SYNTHESIZED."""
    EMPTY = "empty"
    BUILDING = "building"
    SYNTHESIZED = "synthesized"

# -----------------------------------------------------------------------------
# STRUCTURAL COMPONENTS
# -----------------------------------------------------------------------------

@dataclass(eq=False)
class ConstructNode:
    """
    One declared unit of infrastructure inside a stack.

    Grouping constructs have no kind and no type tag; they only scope their
    children. Identity semantics apply: two nodes are equal only if they are
    the same object.

    Attributes:
        node_id: Identifier, unique among the siblings.
        kind: Document block kind (resource, data, provider, output).
        type_tag: Resource kind identifier, e.g. 'docker_container'.
        properties: Ordered property mapping of the node.
        parent: Owning node; None for stacks and detached nodes.
        children: Child nodes in insertion order.
    """
    node_id: str
    kind: Optional[str] = None
    type_tag: Optional[str] = None
    properties: Properties = field(default_factory=dict)
    parent: Optional[ConstructNode] = field(default=None, repr=False)
    children: List[ConstructNode] = field(default_factory=list, repr=False)
    _index: Dict[str, ConstructNode] = field(default_factory=dict, init=False, repr=False)

    def find_child(self, node_id: str) -> Optional[ConstructNode]:
        """Return the direct child registered under node_id, if any."""
        return self._index.get(node_id)

    def attach(self, child: ConstructNode) -> None:
        """Register child as the last child of this node (no validation)."""
        child.parent = self
        self.children.append(child)
        self._index[child.node_id] = child

    @property
    def is_construct(self) -> bool:
        """True for grouping nodes that do not emit a document block."""
        return self.kind is None

    @property
    def root(self) -> ConstructNode:
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    @property
    def scope_path(self) -> List[str]:
        """Ids from just below the root down to this node."""
        ids: List[str] = []
        node: Optional[ConstructNode] = self
        while node is not None and node.parent is not None:
            ids.append(node.node_id)
            node = node.parent
        ids.reverse()
        return ids

    @property
    def path(self) -> str:
        """Slash separated path including the root id."""
        return PATH_SEPARATOR.join([self.root.node_id] + self.scope_path)

    @property
    def logical_id(self) -> str:
        """
        Identifier used for this node inside the synthesized document.

        Nodes placed directly under the stack keep their id. Nested nodes
        join their scope path and append a short hash of it, so that
        'a/b_c' and 'a_b/c' never collide.
        """
        components = self.scope_path
        if not components:
            return self.node_id
        if len(components) == 1:
            return components[0]

        digest = hashlib.md5(PATH_SEPARATOR.join(components).encode("utf-8")).hexdigest()
        suffix = digest[:LOGICAL_ID_HASH_LENGTH].upper()
        return LOGICAL_ID_SEPARATOR.join(components + [suffix])

    def walk(self) -> Iterator[ConstructNode]:
        """Pre-order traversal in insertion order, starting with self."""
        yield self
        for child in self.children:
            yield from child.walk()

    def ref(self, attribute: str) -> Reference:
        """
        Build a reference to one attribute of this node.

        Raises:
            InvalidPropertyError: If the node is not a resource or data source,
                or the attribute name is empty.
        """
        if self.kind not in REFERENCEABLE_KINDS:
            raise InvalidPropertyError(
                f"Node '{self.path}' of kind '{self.kind}' cannot be referenced.",
                {"path": self.path},
            )
        if not isinstance(attribute, str) or not attribute.strip():
            raise InvalidPropertyError(
                f"Reference to '{self.path}' needs a non-empty attribute name.",
                {"path": self.path},
            )
        return Reference(target=self, attribute=attribute.strip())


@dataclass(eq=False)
class Stack(ConstructNode):
    """
    Root construct node of one synthesis unit.

    Attributes:
        state: Lifecycle position of the stack.
        app: Owning application context.
    """
    state: StackState = StackState.EMPTY
    app: Optional[App] = field(default=None, repr=False)

    @property
    def name(self) -> str:
        return self.node_id

    @property
    def is_locked(self) -> bool:
        return self.state is StackState.SYNTHESIZED


@dataclass(eq=False)
class App:
    """
    Application context owning a set of uniquely named stacks.

    Attributes:
        outdir: Directory where full synthesis writes its documents.
        stacks: Registered stacks keyed by name, in creation order.
    """
    outdir: str = DEFAULT_OUTPUT_DIR
    stacks: Dict[str, Stack] = field(default_factory=dict)

    def get_stack(self, name: str) -> Optional[Stack]:
        return self.stacks.get(name)

    @property
    def stack_names(self) -> List[str]:
        return list(self.stacks.keys())

# -----------------------------------------------------------------------------
# REFERENCES
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Reference:
    """
    Pointer to an attribute of a resource or data source node.

    Rendered during synthesis as a Terraform interpolation token.

    Attributes:
        target: Referenced node.
        attribute: Attribute name on the referenced node.
    """
    target: ConstructNode
    attribute: str

    def render(self) -> str:
        """Return the interpolation token, e.g. '${docker_image.web.name}'."""
        prefix = "data." if self.target.kind == BLOCK_DATA else ""
        return "${%s%s.%s.%s}" % (
            prefix,
            self.target.type_tag,
            self.target.logical_id,
            self.attribute,
        )
