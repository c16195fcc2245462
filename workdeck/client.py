"""
Workdeck API client
REST client for the work-dispatch backend (consumers and resource bundles)
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from .config import ClientConfig
from .exceptions import APIError, AuthenticationError, NotFoundError
from .models import (
    ConsumerRef,
    WorkSummary,
    bundle_name,
    consumer_from_wire,
    summary_from_wire,
)

logger = logging.getLogger(__name__)

API_PREFIX = '/api/maestro/v1'


def _items(response: Any) -> List[Dict[str, Any]]:
    if isinstance(response, dict) and 'items' in response:
        return response['items'] or []
    return response if isinstance(response, list) else []


class ConsumersAPI:
    """Consumer endpoints"""

    def __init__(self, client: 'WorkdeckClient'):
        self.client = client

    def list(self) -> List[ConsumerRef]:
        """List all consumers"""
        response = self.client._request('GET', f'{API_PREFIX}/consumers')
        return [consumer_from_wire(c) for c in _items(response)]

    def get_by_name(self, name: str) -> ConsumerRef:
        """Find a consumer by name

        Raises:
            NotFoundError: If no consumer has that name
        """
        response = self.client._request(
            'GET', f'{API_PREFIX}/consumers', params={'search': f"name='{name}'"}
        )
        for consumer in (consumer_from_wire(c) for c in _items(response)):
            if consumer.name == name:
                return consumer
        raise NotFoundError(f'consumer {name!r} not found')

    def create(self, name: str) -> ConsumerRef:
        """Create a consumer

        Args:
            name: Consumer name

        Returns:
            The created consumer
        """
        response = self.client._request('POST', f'{API_PREFIX}/consumers', json={'name': name})
        if isinstance(response, dict):
            return consumer_from_wire(response)
        return ConsumerRef(id='', name=name)

    def delete(self, consumer_id: str) -> None:
        """Delete a consumer by ID"""
        self.client._request('DELETE', f'{API_PREFIX}/consumers/{consumer_id}')


class BundlesAPI:
    """Resource bundle (work record) endpoints"""

    def __init__(self, client: 'WorkdeckClient'):
        self.client = client

    def list_raw(self, consumer_name: str) -> List[Dict[str, Any]]:
        """List wire records addressed to a consumer"""
        response = self.client._request(
            'GET',
            f'{API_PREFIX}/resource-bundles',
            params={'search': f"consumer_name='{consumer_name}'"},
        )
        return _items(response)

    def list(self, consumer_name: str) -> List[WorkSummary]:
        """List work summaries for a consumer"""
        return [summary_from_wire(b, consumer_name) for b in self.list_raw(consumer_name)]

    def get(self, bundle_id: str) -> Dict[str, Any]:
        """Fetch a single wire record by ID

        Raises:
            NotFoundError: If the record does not exist
        """
        response = self.client._request('GET', f'{API_PREFIX}/resource-bundles/{bundle_id}')
        if not isinstance(response, dict):
            raise APIError(f'unexpected response for resource bundle {bundle_id}')
        return response

    def get_by_name(self, consumer_name: str, name: str) -> Dict[str, Any]:
        """Fetch a wire record by consumer and name

        Raises:
            NotFoundError: If no record with that name exists for the consumer
        """
        for bundle in self.list_raw(consumer_name):
            if bundle_name(bundle) == name:
                return bundle
        raise NotFoundError(f'work {name!r} not found in consumer {consumer_name!r}')

    def delete(self, bundle_id: str) -> None:
        """Delete a record by ID"""
        self.client._request('DELETE', f'{API_PREFIX}/resource-bundles/{bundle_id}')


class WorkdeckClient:
    """
    Main backend client

    Usage:
        client = WorkdeckClient(ClientConfig(http_endpoint='http://localhost:8000'))

        consumers = client.consumers.list()
        work = client.bundles.list(consumers[0].name)
    """

    def __init__(self, config: ClientConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.server_url = config.http_endpoint.rstrip('/')
        self.timeout = config.timeout
        self.session = session or requests.Session()

        if config.token:
            self.session.headers['Authorization'] = f'Bearer {config.token}'
        if config.insecure:
            self.session.verify = False
        elif config.ca_file:
            self.session.verify = config.ca_file

        self.consumers = ConsumersAPI(self)
        self.bundles = BundlesAPI(self)

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict] = None,
        json: Optional[Dict] = None
    ) -> Any:
        """Make HTTP request to API, mapping failures onto workdeck exceptions"""
        url = f'{self.server_url}{path}'
        logger.debug('%s %s params=%s', method, url, params)

        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=json,
                timeout=self.timeout
            )
        except requests.Timeout as e:
            raise APIError(f'request to {url} timed out after {self.timeout}s') from e
        except requests.RequestException as e:
            raise APIError(f'request to {url} failed: {e}') from e

        if response.status_code == 404:
            raise NotFoundError(f'{method} {path}: not found')
        if response.status_code in (401, 403):
            raise AuthenticationError(
                f'{method} {path}: authentication failed ({response.status_code})',
                status_code=response.status_code,
            )
        if response.status_code >= 400:
            raise APIError(
                f'{method} {path}: HTTP {response.status_code}: {_error_reason(response)}',
                status_code=response.status_code,
            )

        if response.status_code == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError:
            return response.text

    def health(self) -> List[ConsumerRef]:
        """Handshake: list consumers to prove the endpoint and token work"""
        return self.consumers.list()

    def close(self):
        """Close the session"""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def _error_reason(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return (response.text or '').strip()[:200]
    if isinstance(body, dict):
        return str(body.get('reason') or body.get('message') or body)
    return str(body)
