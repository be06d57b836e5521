"""
Services

- DocumentService: SGF documents stored in Google Drive
"""

from .document_service import DocumentService

__all__ = [
    "DocumentService",
]
