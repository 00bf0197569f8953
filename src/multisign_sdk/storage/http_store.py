"""
HTTP document store

Loads and saves the document collection from a remote service exposing
`GET <base>/documents` and `PUT <base>/documents` with JSON bodies.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urljoin, urlparse

import requests
from requests.adapters import HTTPAdapter, Retry

from ..documents.types import Document
from ..exceptions import ErrorCodes, StorageError, ValidationError
from ..version import __version__
from .base import DocumentStore
from .serialization import document_from_dict, document_to_dict

logger = logging.getLogger(__name__)


@dataclass
class HttpStoreConfig:
    """Configuration for a remote document store."""
    base_url: str
    timeout: float = 30.0
    verify_ssl: bool = True
    retry_attempts: int = 3
    retry_backoff_factor: float = 0.3
    headers: Optional[Dict[str, str]] = None

    def __post_init__(self):
        if not self.base_url:
            raise ValidationError("Document store base_url cannot be empty")

        if not self.base_url.endswith('/'):
            self.base_url += '/'

        parsed = urlparse(self.base_url)
        if not parsed.scheme or not parsed.netloc:
            raise ValidationError(f"Invalid document store URL format: {self.base_url}")

        if self.timeout <= 0:
            raise ValidationError("Timeout must be positive")

        if self.retry_attempts < 0:
            raise ValidationError("Retry attempts must be non-negative")


class HttpDocumentStore(DocumentStore):
    """
    Document store backed by a remote HTTP service
    """

    endpoint = 'documents'

    def __init__(self, config: HttpStoreConfig, session: Optional[requests.Session] = None):
        """
        Initialize the HTTP store.

        Args:
            config: Remote store settings
            session: Preconfigured session; one with retries is created when omitted
        """
        self.config = config
        self.session = session or self._create_session()
        logger.info(f"Initialized HTTP document store: {config.base_url}")

    @classmethod
    def from_url(cls, base_url: str, **kwargs) -> 'HttpDocumentStore':
        return cls(HttpStoreConfig(base_url=base_url, **kwargs))

    def _create_session(self) -> requests.Session:
        session = requests.Session()

        retry_strategy = Retry(
            total=self.config.retry_attempts,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["HEAD", "GET", "PUT"],
            backoff_factor=self.config.retry_backoff_factor,
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        session.headers.update({
            'Content-Type': 'application/json',
            'Accept': 'application/json',
            'User-Agent': f'MultiSign-Python-SDK/{__version__}',
        })
        if self.config.headers:
            session.headers.update(self.config.headers)

        return session

    def load_all(self) -> List[Document]:
        data = self._make_request('GET')
        records = data.get('documents', []) if isinstance(data, dict) else data

        if not isinstance(records, list):
            raise StorageError("Document store returned an unexpected payload", details={'type': type(records).__name__})

        return [document_from_dict(record) for record in records]

    def save_all(self, documents: Iterable[Document]) -> None:
        records = [document_to_dict(doc) for doc in documents]
        self._make_request('PUT', json={'documents': records})
        logger.debug(f"Saved {len(records)} documents to {self.config.base_url}")

    def _make_request(self, method: str, **kwargs) -> Any:
        """
        Make HTTP request with error handling.

        Raises:
            StorageError: On HTTP or network errors
        """
        url = urljoin(self.config.base_url, self.endpoint)
        kwargs.setdefault('timeout', self.config.timeout)
        kwargs.setdefault('verify', self.config.verify_ssl)

        try:
            logger.debug(f"Making {method} request to {url}")
            response = self.session.request(method, url, **kwargs)
        except requests.exceptions.Timeout:
            raise StorageError(f"Request timeout after {self.config.timeout} seconds", details={'url': url})
        except requests.exceptions.ConnectionError as e:
            raise StorageError(f"Connection error: {e}", details={'url': url})
        except requests.exceptions.RequestException as e:
            raise StorageError(f"Request failed: {e}", details={'url': url})

        if not response.ok:
            raise StorageError(
                f"Document store request failed: HTTP {response.status_code}: {response.reason}",
                ErrorCodes.STORAGE_FAILED,
                {'url': url, 'status_code': response.status_code},
                http_status=response.status_code
            )

        if method == 'PUT' or not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise StorageError(f"Invalid JSON response: {e}", details={'url': url})
