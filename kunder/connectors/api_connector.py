"""API connector for HTTP-based APIs."""
import requests
from typing import Any, Dict, Optional
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
import logging

from .base_connector import BaseConnector

logger = logging.getLogger(__name__)

USER_AGENT = 'kunder-maintenance/0.3'


class APIConnector(BaseConnector):
    """
    Connector for REST APIs.

    Wraps a requests session. Retries are off by default: a failed call is
    reported for its record and the operator re-runs the script.
    """

    def __init__(
        self,
        name: str,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: int = 30,
        retry_attempts: int = 0,
        retry_delay: int = 5,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize API connector.

        Args:
            name: Name of the API service
            base_url: Base URL for the API
            api_key: Optional API key for bearer authentication
            timeout: Request timeout in seconds
            retry_attempts: Number of retry attempts on 429/5xx
            retry_delay: Backoff factor between retries in seconds
            session: Pre-built session (tests pass a mock here)
        """
        super().__init__(name, timeout)
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay
        self.session = session if session is not None else requests.Session()
        if session is None:
            self._setup_retry_strategy()

    def _setup_retry_strategy(self) -> None:
        """Configure retry strategy for the session."""
        retry_strategy = Retry(
            total=self.retry_attempts,
            backoff_factor=self.retry_delay,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=['GET', 'HEAD'],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount('http://', adapter)
        self.session.mount('https://', adapter)

    def authenticate(self) -> bool:
        """
        Authenticate with the API.
        For API key auth, this just sets headers.
        """
        self.session.headers.update({'User-Agent': USER_AGENT})
        if self.api_key:
            self.session.headers.update({
                'Authorization': f'Bearer {self.api_key}',
            })
        self.logger.debug(f'Authenticated with {self.name}')
        return True

    def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> requests.Response:
        """
        Make a request and raise for HTTP error statuses.

        Args:
            method: HTTP method
            endpoint: API endpoint (relative to base_url)
            params: Query parameters
            json: JSON body
            headers: Additional headers

        Returns:
            The response

        Raises:
            requests.RequestException: If request fails
        """
        url = f'{self.base_url}/{endpoint.lstrip("/")}'
        merged_headers = {**self.session.headers}
        if headers:
            merged_headers.update(headers)

        response = self.session.request(
            method,
            url,
            params=params,
            json=json,
            headers=merged_headers,
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response

    def get(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Make a GET request.

        Returns:
            JSON response
        """
        return self.request('GET', endpoint, params=params, headers=headers).json()

    def close(self) -> None:
        """Close the session."""
        self.session.close()
        self.logger.debug(f'Closed connection to {self.name}')
