"""
Google OAuth2 API Client
Fetches the profile of the user the credentials belong to
"""
from typing import Any, Dict, List

from googleapiclient.discovery import build

from ...utils.logger import setup_logger
from ..base import BaseGoogleAPIClient

logger = setup_logger(__name__)


class GoogleOAuth2Client(BaseGoogleAPIClient):
    """Google OAuth2 v2 API client"""

    def _build_service(self) -> Any:
        return build('oauth2', 'v2', http=self._authorized_http(), cache_discovery=False)

    def _get_required_scopes(self) -> List[str]:
        return [
            'https://www.googleapis.com/auth/userinfo.email',
            'https://www.googleapis.com/auth/userinfo.profile',
            'openid',
        ]

    def _get_service_name(self) -> str:
        return "Google OAuth2"

    def userinfo(self) -> Dict[str, Any]:
        """
        Get the Google profile of the current user

        Returns:
            Userinfo dict (id, email, name, picture, ...)
        """
        user_info = self._require_service().userinfo().get().execute()
        logger.info(f"Retrieved user info for: {user_info.get('email')}")
        return user_info
