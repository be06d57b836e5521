"""
Google OAuth 2.0 flow construction
"""
from typing import List, Optional

from google_auth_oauthlib.flow import Flow

from ..utils.config import ConfigDefaults
from .client_secrets import ClientSecrets

# OAuth scopes
SCOPES = list(ConfigDefaults.SCOPES_DEFAULT)


def build_flow(
    client_secrets: ClientSecrets,
    redirect_uri: str,
    scopes: Optional[List[str]] = None,
    state: Optional[str] = None
) -> Flow:
    """Build a web-server flow bound to one redirect URI"""
    return Flow.from_client_config(
        client_secrets.to_client_config(redirect_uri),
        scopes=scopes or SCOPES,
        redirect_uri=redirect_uri,
        state=state,
        autogenerate_code_verifier=False  # the code is exchanged by a different Flow instance
    )
