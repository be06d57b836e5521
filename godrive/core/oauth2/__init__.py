"""
Google OAuth2 (userinfo) Core Module
"""
from .google_client import GoogleOAuth2Client

__all__ = ['GoogleOAuth2Client']
