"""
OAuth2 client secrets

Reads the client_secrets.json downloaded from the Google Cloud console
("web" or "installed" section). When the file is absent the client id and
secret may come from GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET instead.
"""
import json
import os
from functools import lru_cache
from typing import Dict, List

from pydantic import BaseModel, ValidationError

from ..core.exceptions import ClientSecretsError
from ..utils.config import ConfigDefaults
from ..utils.logger import setup_logger

logger = setup_logger(__name__)


class ClientSecrets(BaseModel):
    """The subset of client_secrets.json the OAuth flow needs"""
    client_id: str
    client_secret: str
    auth_uri: str = ConfigDefaults.AUTH_URI
    token_uri: str = ConfigDefaults.TOKEN_URI
    redirect_uris: List[str] = []

    def to_client_config(self, redirect_uri: str) -> Dict[str, dict]:
        """Client config in the shape google_auth_oauthlib.flow.Flow expects"""
        return {
            "web": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "auth_uri": self.auth_uri,
                "token_uri": self.token_uri,
                "redirect_uris": [redirect_uri],
            }
        }


@lru_cache(maxsize=None)
def load_client_secrets(path: str = ConfigDefaults.CLIENT_SECRETS_PATH_DEFAULT) -> ClientSecrets:
    """
    Load client secrets once per path.

    Raises:
        ClientSecretsError: If neither the file nor the environment provides them
    """
    if os.path.exists(path):
        try:
            with open(path, 'r') as f:
                data = json.load(f)
            section = data.get('web') or data.get('installed')
            if not section:
                raise ClientSecretsError(f"{path} has no 'web' or 'installed' section")
            secrets = ClientSecrets(**section)
            logger.info(f"Loaded OAuth client secrets from {path}")
            return secrets
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            raise ClientSecretsError(f"Invalid client secrets file {path}: {e}") from e

    client_id = os.getenv('GOOGLE_CLIENT_ID')
    client_secret = os.getenv('GOOGLE_CLIENT_SECRET')
    if client_id and client_secret:
        logger.info("Using OAuth client secrets from GOOGLE_CLIENT_ID/GOOGLE_CLIENT_SECRET")
        return ClientSecrets(client_id=client_id, client_secret=client_secret)

    raise ClientSecretsError("No client_secrets.json found")
