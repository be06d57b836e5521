"""
Document Service

Combines Drive file metadata with the parsed SGF content into the document
JSON the editor works with:

    {
        "resource_id": "1AbC...",
        "title": "game.sgf",
        "mime_type": "application/x-go-sgf",
        "modified_time": "2024-03-01T10:00:00.000Z",
        "editable": true,
        "content": "(;FF[4]GM[1]SZ[19]...)",
        "info": {"title": "game.sgf", "properties": {"PB": "...", "PW": "..."}},
        "moves": [{"color": "B", "point": "pd"}, ...]
    }
"""
from typing import Any, Dict, Optional, Tuple

from ..core.drive import GoogleDriveClient
from ..sgf import (
    Collection,
    apply_game_info,
    decode,
    dumps,
    encode,
    get_game_info,
    main_line,
    new_game,
    parse,
    update_node,
)
from ..utils.config import Config
from ..utils.logger import setup_logger

logger = setup_logger(__name__)


class DocumentService:
    """SGF documents stored in Google Drive"""

    def __init__(self, config: Config, drive: GoogleDriveClient):
        self.config = config
        self.drive = drive

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def load(self, file_id: str) -> Dict[str, Any]:
        """
        Load a document

        Raises:
            HttpError: From the Drive API (e.g. 404 for an unknown file)
            SgfParseError: If the file is not well-formed SGF
        """
        metadata = self.drive.get_file(file_id)
        content = decode(self.drive.get_file_content(file_id))
        return self._document(metadata, content)

    def new(self, parent_id: Optional[str] = None) -> Dict[str, Any]:
        """An unsaved document with an empty game"""
        content = new_game(self.config.app.board_size, application=self.config.app.name)
        document = self._build(
            resource_id=None,
            title=self.config.app.default_title,
            mime_type=self.config.app.default_mimetype,
            modified_time=None,
            editable=True,
            content=content,
            collection=parse(content)
        )
        if parent_id:
            document['parent_id'] = parent_id
        return document

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def create(self, title: Optional[str], content: Optional[str], parent_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Create a file from SGF text (an empty game when no content is given)

        Raises:
            SgfParseError: If content is not well-formed SGF
        """
        if not content or not content.strip():
            content = new_game(self.config.app.board_size, application=self.config.app.name)
        collection = parse(content)
        content, data = self._encode(content, collection)

        metadata = self.drive.create_file(
            title or self.config.app.default_title,
            data,
            mime_type=self.config.app.default_mimetype,
            parents=[parent_id] if parent_id else None
        )
        return self._document(metadata, content, collection)

    def update(self, file_id: str, title: Optional[str] = None, content: Optional[str] = None) -> Dict[str, Any]:
        """
        Rename a file and/or replace its content

        Raises:
            SgfParseError: If content is not well-formed SGF
        """
        collection = None
        data = None
        if content is not None:
            collection = parse(content)
            content, data = self._encode(content, collection)

        metadata = self.drive.update_file(
            file_id,
            title=title,
            content=data,
            mime_type=self.config.app.default_mimetype
        )
        if content is None:
            content = decode(self.drive.get_file_content(file_id))
        return self._document(metadata, content, collection)

    def save_info(self, file_id: str, properties: Dict[str, Optional[str]]) -> Dict[str, Any]:
        """
        Apply game info to the first game of a file and save it

        Raises:
            SgfValueError: On an unknown game info property or malformed value
        """
        collection = self._read_collection(file_id)
        apply_game_info(collection.first, properties)
        return self._write_collection(file_id, collection)

    def save_node(self, file_id: str, node_id: int, properties: Dict[str, Any]) -> Dict[str, Any]:
        """
        Update one node of the first game of a file and save it

        Raises:
            NodeNotFoundError: If node_id does not exist
            SgfValueError: On an invalid property identifier
        """
        collection = self._read_collection(file_id)
        update_node(collection.first, node_id, properties)
        return self._write_collection(file_id, collection)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _read_collection(self, file_id: str) -> Collection:
        content = decode(self.drive.get_file_content(file_id))
        return parse(content) if content.strip() else self._empty_game()

    def _write_collection(self, file_id: str, collection: Collection) -> Dict[str, Any]:
        content, data = self._encode(dumps(collection), collection)
        metadata = self.drive.update_file(
            file_id,
            content=data,
            mime_type=self.config.app.default_mimetype
        )
        logger.info(f"Saved document {file_id}")
        return self._document(metadata, content, collection)

    def _empty_game(self) -> Collection:
        return parse(new_game(self.config.app.board_size, application=self.config.app.name))

    @staticmethod
    def _encode(content: str, collection: Collection) -> Tuple[str, bytes]:
        """
        File bytes in the charset named by the CA property

        Content the charset cannot hold is stored as UTF-8, with CA
        rewritten to say so; the returned text is then the rewritten one.
        """
        try:
            return content, encode(content)
        except (LookupError, UnicodeEncodeError) as e:
            logger.info(f"Storing document as UTF-8: {e}")

        for tree in collection:
            for node in tree.nodes():
                if 'CA' in node.properties:
                    node.set('CA', 'UTF-8')
        content = dumps(collection)
        return content, content.encode('utf-8')

    def _document(self, metadata: Dict[str, Any], content: str, collection: Optional[Collection] = None) -> Dict[str, Any]:
        # Files created from the Drive UI start out empty
        if collection is None:
            collection = parse(content) if content.strip() else self._empty_game()

        return self._build(
            resource_id=metadata.get('id'),
            title=metadata.get('name'),
            mime_type=metadata.get('mimeType', self.config.app.default_mimetype),
            modified_time=metadata.get('modifiedTime'),
            editable=metadata.get('capabilities', {}).get('canEdit', True),
            content=content,
            collection=collection
        )

    @staticmethod
    def _build(
        resource_id: Optional[str],
        title: Optional[str],
        mime_type: str,
        modified_time: Optional[str],
        editable: bool,
        content: str,
        collection: Collection
    ) -> Dict[str, Any]:
        tree = collection.first
        return {
            "resource_id": resource_id,
            "title": title,
            "mime_type": mime_type,
            "modified_time": modified_time,
            "editable": editable,
            "content": content,
            "info": {
                "title": title,
                "properties": get_game_info(tree),
            },
            "moves": main_line(tree),
        }
