"""
Core business logic modules

Google API clients used on behalf of the logged-in user.
"""

from .drive.google_client import GoogleDriveClient
from .oauth2.google_client import GoogleOAuth2Client

__all__ = [
    'GoogleDriveClient',
    'GoogleOAuth2Client',
]
