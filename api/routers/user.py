"""
User and About Endpoints
"""
from fastapi import APIRouter, Depends
from googleapiclient.errors import HttpError

from godrive.utils.logger import setup_logger

from ..base import APPLICATION_NAME, GoDriveEndpoint
from ..dependencies import get_godrive

logger = setup_logger(__name__)
router = APIRouter(tags=["user"])


@router.get("/user")
def user(godrive: GoDriveEndpoint = Depends(get_godrive)):
    """
    Profile of the logged-in user

    Includes the current access token, which the browser needs for the
    Drive file picker.
    """
    credentials = godrive.require_credential()
    try:
        profile = godrive.get_oauth2_service(credentials).userinfo()
    except HttpError as e:
        return godrive.send_google_json_response_error(e)

    profile['access_token'] = credentials.token
    return godrive.send_json(profile)


@router.get("/about")
def about(godrive: GoDriveEndpoint = Depends(get_godrive)):
    """Drive user and storage quota"""
    credentials = godrive.require_credential()
    try:
        about_info = godrive.get_drive_service(credentials).about()
    except HttpError as e:
        return godrive.send_google_json_response_error(e)

    about_info['app_name'] = APPLICATION_NAME
    about_info['app_id'] = godrive.config.google.app_id
    return godrive.send_json(about_info)
