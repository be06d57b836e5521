"""
SGF (FF[4]) reader

    Collection = GameTree { GameTree }
    GameTree   = "(" Sequence { GameTree } ")"
    Sequence   = Node { Node }
    Node       = ";" { Property }
    Property   = PropIdent PropValue { PropValue }
    PropValue  = "[" CValueType "]"

Inside values a backslash escapes the next character and a backslash
followed by a line break is removed. Lower-case letters in property
identifiers (FF[3] long names such as "AddBlack") are dropped.
"""
import codecs
import re
from typing import List, Optional

from .exceptions import SgfParseError
from .model import Collection, GameTree, Node

_CHARSET = re.compile(rb'CA\[([^\]]*)\]')


def decode(data: bytes) -> str:
    """
    Decode raw file content using the charset named in the CA property.

    Falls back to UTF-8, then Latin-1 (which never fails).
    """
    if data.startswith(codecs.BOM_UTF8):
        return data[len(codecs.BOM_UTF8):].decode('utf-8')

    match = _CHARSET.search(data[:4096])
    if match:
        charset = match.group(1).decode('ascii', 'ignore').strip()
        try:
            return data.decode(charset)
        except (LookupError, UnicodeDecodeError):
            pass

    try:
        return data.decode('utf-8')
    except UnicodeDecodeError:
        return data.decode('latin-1')


class _Reader:

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def error(self, message: str):
        raise SgfParseError(message, self.pos)

    def skip_whitespace(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def peek(self) -> Optional[str]:
        self.skip_whitespace()
        if self.pos < len(self.text):
            return self.text[self.pos]
        return None

    def expect(self, char: str) -> None:
        if self.peek() != char:
            found = self.text[self.pos] if self.pos < len(self.text) else 'end of input'
            self.error(f"Expected {char!r}, found {found!r}")
        self.pos += 1

    def collection(self) -> Collection:
        games: List[GameTree] = []
        while self.peek() == '(':
            root = Node()
            self.game_tree(root)
            games.append(GameTree(root.children[0]))
            games[-1].root.parent = None
        if not games:
            self.error("Expected a game tree")
        if self.peek() is not None:
            self.error("Unexpected content after last game tree")
        return Collection(games)

    def game_tree(self, parent: Node) -> None:
        self.expect('(')
        if self.peek() != ';':
            self.error("Game tree must start with a node")
        node = parent
        while self.peek() == ';':
            node = node.add_child(self.node())
        while self.peek() == '(':
            self.game_tree(node)
        self.expect(')')

    def node(self) -> Node:
        self.expect(';')
        node = Node()
        while True:
            char = self.peek()
            if char is None or not char.isalpha():
                return node
            ident = self.prop_ident()
            values = []
            while self.peek() == '[':
                values.append(self.prop_value())
            if not values:
                self.error(f"Property {ident} has no value")
            # A repeated identifier extends the existing value list
            node.properties.setdefault(ident, []).extend(values)

    def prop_ident(self) -> str:
        start = self.pos
        while self.pos < len(self.text) and self.text[self.pos].isalpha():
            self.pos += 1
        ident = ''.join(c for c in self.text[start:self.pos] if c.isupper())
        if not ident:
            self.pos = start
            self.error("Property identifier needs an upper-case letter")
        return ident

    def prop_value(self) -> str:
        self.expect('[')
        chars = []
        text = self.text
        while True:
            if self.pos >= len(text):
                self.error("Unterminated property value")
            char = text[self.pos]
            if char == ']':
                self.pos += 1
                return ''.join(chars)
            if char == '\\':
                self.pos += 1
                if self.pos >= len(text):
                    self.error("Unterminated property value")
                escaped = text[self.pos]
                if escaped in '\r\n':
                    # soft line break: swallow \n, \r, \r\n or \n\r
                    self.pos += 1
                    if self.pos < len(text) and text[self.pos] in '\r\n' and text[self.pos] != escaped:
                        self.pos += 1
                    continue
                chars.append(escaped)
                self.pos += 1
                continue
            chars.append(char)
            self.pos += 1


def parse(text: str) -> Collection:
    """
    Parse an SGF document.

    Raises:
        SgfParseError: If the text is not well-formed SGF
    """
    if text.startswith('\ufeff'):
        text = text[1:]
    return _Reader(text).collection()


def parse_bytes(data: bytes) -> Collection:
    """Decode (see `decode`) and parse raw file content"""
    return parse(decode(data))
