"""
SGF File Endpoints
Load, create and save SGF documents stored in Google Drive
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from godrive.utils.logger import setup_logger

from ..base import GoDriveEndpoint
from ..dependencies import get_godrive
from ..exceptions import ValidationError

logger = setup_logger(__name__)
router = APIRouter(prefix="/svc", tags=["files"])


# ============================================
# REQUEST MODELS
# ============================================

class CreateFileRequest(BaseModel):
    """Create a file from SGF text"""
    title: Optional[str] = None
    content: Optional[str] = None
    parent_id: Optional[str] = None


class UpdateFileRequest(BaseModel):
    """Rename a file and/or replace its content"""
    resource_id: str = Field(..., min_length=1)
    title: Optional[str] = None
    content: Optional[str] = None


class GameInfoRequest(BaseModel):
    """Set game info properties; an empty value deletes a property"""
    resource_id: str = Field(..., min_length=1)
    properties: Dict[str, Optional[str]]


class NodeUpdateRequest(BaseModel):
    """Set or delete properties of one node (pre-order id, root is 0)"""
    resource_id: str = Field(..., min_length=1)
    node_id: int = Field(..., ge=0)
    properties: Dict[str, Any]


# ============================================
# ENDPOINTS
# ============================================

@router.get("")
def load_file(
    file_id: str = Query(..., min_length=1),
    godrive: GoDriveEndpoint = Depends(get_godrive)
):
    """Document JSON of a file"""
    return godrive.send_json(godrive.get_document_service().load(file_id))


@router.get("/new")
def new_file(
    parent_id: Optional[str] = None,
    godrive: GoDriveEndpoint = Depends(get_godrive)
):
    """A new, unsaved document"""
    return godrive.send_json(godrive.get_document_service().new(parent_id))


@router.post("")
def create_file(body: CreateFileRequest, godrive: GoDriveEndpoint = Depends(get_godrive)):
    """Save a new document to Drive"""
    document = godrive.get_document_service().create(body.title, body.content, body.parent_id)
    logger.info(f"Created document {document['resource_id']}")
    return godrive.send_json(document)


@router.put("")
def update_file(body: UpdateFileRequest, godrive: GoDriveEndpoint = Depends(get_godrive)):
    """Rename and/or save a document"""
    if body.title is None and body.content is None:
        raise ValidationError("Nothing to update: give a title and/or content")
    document = godrive.get_document_service().update(body.resource_id, body.title, body.content)
    return godrive.send_json(document)


@router.post("/info")
def save_info(body: GameInfoRequest, godrive: GoDriveEndpoint = Depends(get_godrive)):
    """Apply game info to the root node"""
    document = godrive.get_document_service().save_info(body.resource_id, body.properties)
    return godrive.send_json(document)


@router.post("/node")
def save_node(body: NodeUpdateRequest, godrive: GoDriveEndpoint = Depends(get_godrive)):
    """Update the properties of one node"""
    document = godrive.get_document_service().save_node(body.resource_id, body.node_id, body.properties)
    return godrive.send_json(document)
