"""
Game-level operations on SGF trees: game info, node edits, main line
"""
import re
from typing import Dict, List, Optional

from .exceptions import SgfValueError
from .model import Collection, GameTree, Node, PropertyValue
from .writer import dumps

# Root properties describing the game as a whole
GAME_INFO_PROPERTIES = (
    'GN',  # game name
    'EV',  # event
    'RO',  # round
    'DT',  # date
    'PC',  # place
    'PB',  # black player
    'BR',  # black rank
    'BT',  # black team
    'PW',  # white player
    'WR',  # white rank
    'WT',  # white team
    'KM',  # komi
    'HA',  # handicap
    'RE',  # result
    'RU',  # rules
    'TM',  # time limit
    'OT',  # overtime
    'SO',  # source
    'US',  # user
    'AN',  # annotator
    'CP',  # copyright
    'GC',  # game comment
    'ON',  # opening
    'SZ',  # board size
)

_REAL = re.compile(r'^[+-]?\d+(\.\d+)?$')
_SIZE = re.compile(r'^(\d+)(:(\d+))?$')


def _validate_info_value(ident: str, value: str) -> None:
    if ident in ('KM', 'TM') and not _REAL.match(value):
        raise SgfValueError(f"{ident} must be a number, got {value!r}")
    if ident == 'HA' and not value.isdigit():
        raise SgfValueError(f"HA must be a non-negative integer, got {value!r}")
    if ident == 'SZ':
        match = _SIZE.match(value)
        if not match or not all(1 <= int(n) <= 52 for n in (match.group(1), match.group(3) or match.group(1))):
            raise SgfValueError(f"SZ must be 1..52 or columns:rows, got {value!r}")


def get_game_info(tree: GameTree) -> Dict[str, str]:
    """Game info properties present on the root node"""
    root = tree.root
    return {
        ident: root.get(ident)
        for ident in GAME_INFO_PROPERTIES
        if ident in root.properties
    }


def apply_game_info(tree: GameTree, properties: Dict[str, Optional[str]]) -> Dict[str, str]:
    """
    Set game info on the root node. Empty values delete a property.

    All values are validated before any is applied.

    Raises:
        SgfValueError: On an identifier that is not game info, or a malformed value

    Returns:
        The resulting game info
    """
    values = {ident: None if value is None else str(value).strip() for ident, value in properties.items()}
    for ident, value in values.items():
        if ident not in GAME_INFO_PROPERTIES:
            raise SgfValueError(f"{ident!r} is not a game info property")
        if value:
            _validate_info_value(ident, value)

    for ident, value in values.items():
        tree.root.set(ident, value)

    return get_game_info(tree)


def update_node(tree: GameTree, node_id: int, properties: Dict[str, PropertyValue]) -> Node:
    """
    Set or delete properties of the node with the given pre-order id.

    Raises:
        NodeNotFoundError: If node_id does not exist
        SgfValueError: On an invalid property identifier
    """
    node = tree.node(node_id)
    for ident, value in properties.items():
        node.set(ident, value)
    return node


def main_line(tree: GameTree) -> List[Dict[str, str]]:
    """
    Moves along the first variation.

    Returns:
        [{"color": "B"|"W", "point": "dd"}, ...]; a pass has an empty point
        (or "tt" on boards up to 19x19, kept as written)
    """
    moves = []
    node: Optional[Node] = tree.root
    while node is not None:
        for color in ('B', 'W'):
            if color in node.properties:
                moves.append({'color': color, 'point': node.get(color, '')})
        node = node.children[0] if node.children else None
    return moves


def new_game(size: int = 19, komi: Optional[float] = None, application: str = "SGF Editor") -> str:
    """SGF text of an empty game"""
    root = Node()
    root.set('FF', '4')
    root.set('GM', '1')
    root.set('SZ', str(size))
    root.set('CA', 'UTF-8')
    root.set('AP', application)
    if komi is not None:
        root.set('KM', f'{komi:g}')
    return dumps(Collection([GameTree(root)]))
