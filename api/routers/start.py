"""
Start, View and Logout Endpoints

"/" is the OAuth2 callback, the Drive UI "Open with"/"New" entry point and
the application info endpoint.
"""
import json
from typing import Any, Dict, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from godrive.auth.audit import AuditEventType, log_auth_event
from godrive.utils.logger import setup_logger

from ..base import APPLICATION_NAME, DEFAULT_MIMETYPE, GoDriveEndpoint
from ..dependencies import get_godrive
from ..exceptions import ValidationError

logger = setup_logger(__name__)
router = APIRouter(tags=["start"])


def _drive_state_redirect(state: str) -> RedirectResponse:
    """
    Follow the `state` parameter sent by the Drive UI

    {"action": "open", "ids": ["<file id>"], ...}    -> /view/<file id>
    {"action": "create", "folderId": "<folder>", ...} -> /svc/new?parent_id=<folder>
    """
    try:
        drive_state = json.loads(state)
    except ValueError:
        raise ValidationError("state must be a JSON object")
    if not isinstance(drive_state, dict):
        raise ValidationError("state must be a JSON object")

    action = drive_state.get('action')
    if action == 'open':
        ids = drive_state.get('ids') or []
        if not ids:
            raise ValidationError("Drive open state carries no file ids")
        return RedirectResponse(f"/view/{quote(str(ids[0]), safe='')}", status_code=302)

    if action == 'create':
        folder_id = drive_state.get('folderId')
        target = f"/svc/new?parent_id={quote(str(folder_id), safe='')}" if folder_id else "/svc/new"
        return RedirectResponse(target, status_code=302)

    raise ValidationError(f"Unsupported Drive action: {action!r}")


@router.get("/")
def start(
    state: Optional[str] = None,
    error: Optional[str] = None,
    godrive: GoDriveEndpoint = Depends(get_godrive)
):
    """OAuth2 callback, Drive UI entry point or application info"""
    if error:
        log_auth_event(
            godrive.db,
            AuditEventType.LOGIN_FAILURE,
            success=False,
            error_message=error,
            request=godrive.request
        )
        return godrive.send_error(401, f"Authorization was not granted: {error}")

    redirect = godrive.handle_callback_if_required()
    if redirect is not None:
        return redirect

    if state:
        return _drive_state_redirect(state)

    info: Dict[str, Any] = {
        "name": APPLICATION_NAME,
        "mime_type": DEFAULT_MIMETYPE,
        "app_id": godrive.config.google.app_id,
        "client_id": godrive.get_client_secrets().client_id,
        "logged_in": godrive.session_user_id is not None,
    }
    return godrive.send_json(info)


@router.get("/view/{file_id}")
def view(file_id: str, godrive: GoDriveEndpoint = Depends(get_godrive)):
    """Open a file, logging in first if needed"""
    redirect = godrive.login_if_required(file_id)
    if redirect is not None:
        return redirect
    return godrive.send_json(godrive.get_document_service().load(file_id))


@router.get("/login")
def login(godrive: GoDriveEndpoint = Depends(get_godrive)):
    """Log in without a file to return to"""
    return godrive.login_if_required() or RedirectResponse("/", status_code=302)


@router.get("/logout")
def logout(godrive: GoDriveEndpoint = Depends(get_godrive)):
    """Delete the stored credential and return to the start page"""
    godrive.delete_credential()
    return RedirectResponse("/", status_code=302)
