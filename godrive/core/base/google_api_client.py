"""
Base Google API Client
Provides common functionality for the Google API clients (Drive, OAuth2)
"""
from abc import ABC, abstractmethod
from typing import Any, List

import httplib2
from google.oauth2.credentials import Credentials
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.http import set_user_agent

from ...utils.config import Config
from ...utils.logger import setup_logger
from ..exceptions import ServiceUnavailableError

logger = setup_logger(__name__)


class BaseGoogleAPIClient(ABC):
    """
    Abstract base class for Google API clients

    Provides common functionality:
    - Service initialization with user credentials
    - HTTP transport tagged with the application name
    - Scope validation

    Subclasses must implement:
    - _build_service(): Build the specific Google API service
    - _get_required_scopes(): Return required OAuth scopes
    - _get_service_name(): Return the service name for logging
    """

    def __init__(self, config: Config, credentials: Credentials):
        """
        Initialize Google API client

        Args:
            config: Configuration object
            credentials: OAuth2 credentials of the current user
        """
        self.config = config
        self.credentials = credentials
        self.service = None
        self._initialize_service()

    def _initialize_service(self) -> None:
        """Initialize the Google API service"""
        if not self.credentials:
            logger.warning(f"No credentials given. {self._get_service_name()} client disabled.")
            return

        try:
            self.service = self._build_service()
            logger.debug(f"{self._get_service_name()} API service initialized")
        except Exception as e:
            logger.error(f"Failed to initialize {self._get_service_name()} service: {e}")
            self.service = None

    def _authorized_http(self) -> AuthorizedHttp:
        """HTTP transport that signs requests and identifies the application"""
        http = set_user_agent(httplib2.Http(), self.config.app.name)
        return AuthorizedHttp(self.credentials, http=http)

    @abstractmethod
    def _build_service(self) -> Any:
        """
        Build the specific Google API service

        Example:
            return build('drive', 'v3', http=self._authorized_http(), cache_discovery=False)
        """
        pass

    @abstractmethod
    def _get_required_scopes(self) -> List[str]:
        """Get required OAuth scopes for this service"""
        pass

    @abstractmethod
    def _get_service_name(self) -> str:
        """Get the service name for logging"""
        pass

    def is_available(self) -> bool:
        """
        Check if service is available and has proper scopes

        Returns:
            True if service is ready to use, False otherwise
        """
        if self.service is None:
            return False

        if self.credentials and self.credentials.scopes:
            required_scopes = self._get_required_scopes()
            if not any(scope in self.credentials.scopes for scope in required_scopes):
                logger.error(
                    f"[ALERT] {self._get_service_name()} credentials missing required scopes",
                    current_scopes=list(self.credentials.scopes),
                    required_scopes=required_scopes
                )
                return False

        return True

    def _require_service(self) -> Any:
        """
        Raises:
            ServiceUnavailableError: If the service could not be initialized
        """
        if not self.is_available():
            raise ServiceUnavailableError(f"{self._get_service_name()} service not available")
        return self.service
