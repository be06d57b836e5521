"""
In-memory SGF game trees

A collection holds one or more game trees. Each tree is a rooted tree of
nodes; sequences from the file are flattened into single-child chains and
variations become additional children.
"""
import re
from typing import Dict, Iterator, List, Optional, Union

from .exceptions import NodeNotFoundError, SgfValueError

PROP_IDENT = re.compile(r'^[A-Z]+$')

PropertyValue = Union[str, List[str], None]


class Node:
    """One SGF node: an ordered mapping of property identifiers to value lists"""

    def __init__(self, properties: Optional[Dict[str, List[str]]] = None, parent: Optional['Node'] = None):
        self.properties: Dict[str, List[str]] = dict(properties or {})
        self.parent = parent
        self.children: List['Node'] = []

    def get(self, ident: str, default: Optional[str] = None) -> Optional[str]:
        """First value of a property"""
        values = self.properties.get(ident)
        return values[0] if values else default

    def set(self, ident: str, value: PropertyValue) -> None:
        """
        Set a property. None, "" or an empty list deletes it.

        Raises:
            SgfValueError: If ident is not an upper-case property identifier
        """
        if not PROP_IDENT.match(ident or ''):
            raise SgfValueError(f"Invalid property identifier: {ident!r}")

        if value is None or value == '' or (isinstance(value, (list, tuple)) and not value):
            self.properties.pop(ident, None)
            return

        if isinstance(value, (list, tuple)):
            self.properties[ident] = [str(v) for v in value]
        else:
            self.properties[ident] = [str(value)]

    def delete(self, ident: str) -> None:
        self.properties.pop(ident, None)

    def add_child(self, node: Optional['Node'] = None) -> 'Node':
        node = node or Node()
        node.parent = self
        self.children.append(node)
        return node

    def to_dict(self) -> Dict[str, List[str]]:
        return {ident: list(values) for ident, values in self.properties.items()}

    def __repr__(self):
        return f"<Node({', '.join(self.properties)}; children={len(self.children)})>"


class GameTree:
    """A single game record"""

    def __init__(self, root: Optional[Node] = None):
        self.root = root or Node()

    def nodes(self) -> Iterator[Node]:
        """Depth-first pre-order traversal; the position in it is the node id"""
        stack = [self.root]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def node(self, node_id: int) -> Node:
        """
        Look up a node by its pre-order id (0 is the root).

        Raises:
            NodeNotFoundError: If no such node exists
        """
        if node_id >= 0:
            for index, node in enumerate(self.nodes()):
                if index == node_id:
                    return node
        raise NodeNotFoundError(node_id)

    def node_count(self) -> int:
        return sum(1 for _ in self.nodes())


class Collection:
    """All game trees of one SGF document"""

    def __init__(self, games: Optional[List[GameTree]] = None):
        self.games: List[GameTree] = list(games or [])

    @property
    def first(self) -> GameTree:
        return self.games[0]

    def __len__(self):
        return len(self.games)

    def __iter__(self):
        return iter(self.games)
