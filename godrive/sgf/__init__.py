"""
Smart Game Format (SGF) support for Go game records

    collection = parse(text)
    tree = collection.first
    apply_game_info(tree, {'PB': 'Honinbo Shusaku', 'KM': '0'})
    text = dumps(collection)
"""
from .exceptions import SgfError, SgfParseError, SgfValueError, NodeNotFoundError
from .model import Collection, GameTree, Node
from .parser import parse, parse_bytes, decode
from .writer import dumps, dump_tree, encode, escape
from .game import (
    GAME_INFO_PROPERTIES,
    get_game_info,
    apply_game_info,
    update_node,
    main_line,
    new_game,
)

__all__ = [
    'SgfError',
    'SgfParseError',
    'SgfValueError',
    'NodeNotFoundError',
    'Collection',
    'GameTree',
    'Node',
    'parse',
    'parse_bytes',
    'decode',
    'dumps',
    'dump_tree',
    'encode',
    'escape',
    'GAME_INFO_PROPERTIES',
    'get_game_info',
    'apply_game_info',
    'update_node',
    'main_line',
    'new_game',
]
