"""
GoDrive - SGF editor backed by Google Drive
"""

__version__ = "1.0.0"
