import inspect
import logging
import time
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Sequence

from cnstrc_client.auth.authenticator import Authenticator
from cnstrc_client.config import ClientConfig
from cnstrc_client.exceptions import (
    AuthenticationError,
    HttpError,
    MalformedResponseError,
)
from cnstrc_client.utils.metrics import APIMetrics
from cnstrc_client.utils.normalizer import normalize_response
from cnstrc_client.utils.params import (
    UserContext,
    build_query_params,
    build_url,
    validate_request_parameters,
)
from cnstrc_client.utils.transport import Fetch, aiohttp_fetch

logger = logging.getLogger(__name__)

class BaseClient:
    def __init__(self, config: ClientConfig, metrics: Optional[APIMetrics] = None):
        self.config = config
        self.metrics = metrics if metrics is not None else APIMetrics()

    @property
    def base_url(self) -> str:
        return self.config.service_url

    def _get_fetch(self, config: ClientConfig) -> Fetch:
        return config.fetch or aiohttp_fetch

    @staticmethod
    def _resolve_user(user_parameters, config: ClientConfig) -> Dict[str, Any]:
        return UserContext.coerce(user_parameters).merged_with(config)

    @staticmethod
    async def _read_json(response) -> Any:
        data = response.json()
        if inspect.isawaitable(data):
            data = await data
        return data

    async def _http_error_from_response(self, response) -> HttpError:
        """Build a structured error from a non-2xx response"""
        status = getattr(response, 'status', None)
        status_text = getattr(response, 'reason', None) or getattr(response, 'status_text', None) or ''
        url = getattr(response, 'url', None)
        message = None

        try:
            body = await self._read_json(response)
            if isinstance(body, dict):
                message = body.get('message')
        except (ValueError, TypeError):
            logger.debug(f"Error response from {url} is not JSON")

        if not message:
            message = f"HTTP {status} {status_text}".strip()

        error_class = AuthenticationError if status in (401, 403) else HttpError
        return error_class(message, status=status, status_text=status_text, url=url)

    async def _do_request(self, config: ClientConfig, method: str, url: str,
                          headers: Dict[str, str], body=None):
        """Send the request through the configured transport"""
        fetch = self._get_fetch(config)

        logger.debug(f"Making {method} request to {url.split('?')[0]}")

        response = await fetch(url, {
            'method': method,
            'headers': headers,
            'body': body
        })

        if not response.ok:
            error = await self._http_error_from_response(response)
            logger.error(f"{method} {url.split('?')[0]} failed with status {error.status}: {error.message}")
            raise error

        return response

    async def _parse_json(self, response, operation: str, allow_empty: bool = False) -> Any:
        try:
            data = await self._read_json(response)
        except ValueError as e:
            if allow_empty:
                logger.debug(f"{operation} response body is not JSON, ignoring it")
                return None
            raise MalformedResponseError(f"{operation} response data is malformed") from e

        if data is None and not allow_empty:
            raise MalformedResponseError(f"{operation} response data is malformed")

        return data

    async def _make_request(self, method: str, endpoint: str, url: str, config: Optional[ClientConfig] = None,
                            headers: Optional[Dict[str, str]] = None, body=None, operation: Optional[str] = None,
                            allow_empty: bool = False, postprocess: Optional[Callable[[Any], Any]] = None) -> Any:
        config = config or self.config
        operation = operation or endpoint
        self.metrics.record_request(endpoint)
        start_time = time.time()

        try:
            response = await self._do_request(config, method, url, headers or {}, body)
            data = await self._parse_json(response, operation, allow_empty=allow_empty)
            if postprocess is not None:
                data = postprocess(data)
        except Exception as e:
            self.metrics.record_failure(e)
            raise

        self.metrics.record_success(time.time() - start_time)
        return data

    async def _get_results(self, path_segments: Sequence[Any], operation: str, user_parameters=None,
                           require: Optional[str] = None, **params) -> Dict[str, Any]:
        """
        Validate, build and send a GET request for a result-returning endpoint

        Args:
            path_segments (list): Path below the service url, encoded one segment at a time
            operation (str): Name of the calling method, used in error messages
            user_parameters (UserContext|dict): Per-call identity overrides
            require (str): Result collection that must be present in the response
        """
        config = self.config
        validate_request_parameters(**params)
        user = self._resolve_user(user_parameters, config)

        query_params = build_query_params(config, user, **params)
        url = build_url(config.service_url, path_segments, query_params)
        headers = Authenticator(config).get_headers(user)

        return await self._make_request(
            'GET',
            str(path_segments[0]),
            url,
            config=config,
            headers=headers,
            operation=operation,
            postprocess=lambda data: normalize_response(data, require=require, operation=operation)
        )

    async def test_connection(self, probe_term: str = 'test') -> Dict[str, Any]:
        """
        Test the connection to the API by making a simple autocomplete lookup

        Returns:
            Dict containing connection status and details
        """
        try:
            logger.info("Testing Constructor.io connection...")

            start_time = time.time()
            await self._get_results(['autocomplete', probe_term], 'test_connection')
            response_time = time.time() - start_time

            return {
                'status': 'success',
                'service_url': self.base_url,
                'response_time_ms': round(response_time * 1000, 2),
                'timestamp': datetime.now().isoformat()
            }

        except AuthenticationError as e:
            logger.error(f"Authentication failed during connection test: {str(e)}")
            return {
                'status': 'failed',
                'error': 'authentication_error',
                'message': str(e),
                'timestamp': datetime.now().isoformat()
            }
        except Exception as e:
            logger.error(f"Connection test failed: {str(e)}")
            return {
                'status': 'failed',
                'error': 'connection_error',
                'message': str(e),
                'timestamp': datetime.now().isoformat()
            }
