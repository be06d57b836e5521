"""
SGF serialization
"""
import re
from typing import List

from .model import Collection, GameTree, Node

_CHARSET = re.compile(r'CA\[([^\]]*)\]')


def escape(value: str) -> str:
    """Escape a property value for use between brackets"""
    return value.replace('\\', '\\\\').replace(']', '\\]')


def _write_node(node: Node) -> str:
    parts = [';']
    for ident, values in node.properties.items():
        parts.append(ident)
        parts.extend(f'[{escape(v)}]' for v in values)
    return ''.join(parts)


def _write_tree(node: Node, out: List[str]) -> None:
    out.append('(')
    out.append(_write_node(node))
    while len(node.children) == 1:
        node = node.children[0]
        out.append('\n' if 'B' in node.properties or 'W' in node.properties else '')
        out.append(_write_node(node))
    for child in node.children:
        out.append('\n')
        _write_tree(child, out)
    out.append(')')


def dump_tree(tree: GameTree) -> str:
    out: List[str] = []
    _write_tree(tree.root, out)
    return ''.join(out)


def dumps(collection: Collection) -> str:
    """Serialize a collection; each game tree ends with a newline"""
    return ''.join(dump_tree(tree) + '\n' for tree in collection)


def encode(text: str) -> bytes:
    """
    Encode SGF text in the charset named by its CA property (UTF-8 without one).

    Raises:
        LookupError: If the charset is unknown
        UnicodeEncodeError: If the text has characters the charset cannot hold
    """
    match = _CHARSET.search(text[:4096])
    charset = match.group(1).strip() if match else ''
    return text.encode(charset or 'utf-8')
