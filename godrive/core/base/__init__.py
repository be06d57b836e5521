"""
Base classes for core functionality
"""
from .google_api_client import BaseGoogleAPIClient

__all__ = ['BaseGoogleAPIClient']
