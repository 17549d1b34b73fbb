"""
Base API client with common functionality
"""

import asyncio
from typing import Optional, Dict, Any
import httpx
from insighttask.utils.logger import logger
from insighttask.config.constants import MAX_RETRIES, RETRY_DELAY


RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
# POST inserts are not idempotent
RETRYABLE_METHODS = {"GET", "PATCH", "DELETE"}


class BaseAPIClient:
    """Base class for API clients with common functionality"""

    def __init__(
        self,
        base_url: str,
        timeout: int = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize base API client

        Args:
            base_url: Base URL for API
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)
        self.logger = logger

    async def _request(
        self,
        method: str,
        endpoint: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Any] = None,
        retries: int = MAX_RETRIES,
    ) -> Any:
        """
        Make HTTP request with retry logic

        Transport errors and 429/5xx responses are retried for GET, PATCH
        and DELETE; other 4xx responses and any POST failure are raised
        immediately.

        Args:
            method: HTTP method (GET, POST, PATCH, DELETE)
            endpoint: API endpoint
            headers: Request headers
            params: Query parameters
            json_data: JSON body
            retries: Number of attempts

        Returns:
            Decoded JSON body, or None for empty responses

        Raises:
            httpx.HTTPError: If request fails after all retries
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        if method.upper() not in RETRYABLE_METHODS:
            retries = 1

        for attempt in range(retries):
            try:
                self.logger.debug(f"Request: {method} {url} (attempt {attempt + 1}/{retries})")

                request_kwargs = {
                    "method": method,
                    "url": url,
                    "headers": headers,
                    "params": params,
                }

                if json_data is not None:
                    request_kwargs["json"] = json_data
                    self.logger.debug(f"Request JSON data: {json_data}")

                response = await self.client.request(**request_kwargs)

                self.logger.debug(f"Response status: {response.status_code}")
                if response.status_code >= 400:
                    self.logger.warning(f"Error response body: {response.text[:1000]}")

                response.raise_for_status()

                if response.status_code == 204:
                    return None

                content = response.text.strip()
                if not content:
                    return None
                return response.json()

            except httpx.HTTPStatusError as e:
                status_code = e.response.status_code
                if status_code in RETRYABLE_STATUS_CODES and attempt < retries - 1:
                    self.logger.warning(
                        f"Request failed with status {status_code}, "
                        f"retrying in {RETRY_DELAY * (attempt + 1)} seconds..."
                    )
                    await asyncio.sleep(RETRY_DELAY * (attempt + 1))
                else:
                    self.logger.error(f"Request failed after {attempt + 1} attempts: {e}")
                    raise

            except httpx.RequestError as e:
                if attempt < retries - 1:
                    self.logger.warning(
                        f"Request error: {e}, retrying in {RETRY_DELAY * (attempt + 1)} seconds..."
                    )
                    await asyncio.sleep(RETRY_DELAY * (attempt + 1))
                else:
                    self.logger.error(f"Request error after {retries} attempts: {e}")
                    raise

    async def close(self):
        """Close HTTP client"""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.close()
