"""
SGF Exceptions
"""


class SgfError(Exception):
    """Base exception for SGF handling"""
    pass


class SgfParseError(SgfError):
    """Raised when a document is not well-formed SGF"""

    def __init__(self, message: str, position: int):
        super().__init__(f"{message} at offset {position}")
        self.position = position


class SgfValueError(SgfError):
    """Raised when a property identifier or value is not acceptable"""
    pass


class NodeNotFoundError(SgfError):
    """Raised when a node id does not address a node of the game tree"""

    def __init__(self, node_id: int):
        super().__init__(f"Node {node_id} does not exist")
        self.node_id = node_id
