"""
Google Drive Core Module

Low-level client for the Drive API operations the editor needs.
"""
from .google_client import GoogleDriveClient, FILE_FIELDS

__all__ = ['GoogleDriveClient', 'FILE_FIELDS']
