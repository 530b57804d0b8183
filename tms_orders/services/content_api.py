"""
Content API client.

Every order entity (customer, route, route point, order, statuses, items,
participants) lives in a graph-style content API. Responses wrap each record
in a ``data``/``attributes`` envelope; this client un-nests them into a flat
``{id, ...fields}`` shape before returning.
"""

import httpx
from typing import Any, Dict, List, Optional, Tuple
from fastapi import status
from tms_orders.core.config import settings
from tms_orders.core.exceptions import ContentApiError
from tms_orders.core.logging_config import logger


def _flatten_attributes(data: Dict[str, Any]) -> Dict[str, Any]:
    if "attributes" in data:
        return {"id": data.get("id"), **(data["attributes"] or {})}
    return data


def _transform(data: Any) -> Any:
    if isinstance(data, list):
        return [_transform(item) for item in data]

    if isinstance(data, dict):
        if "data" in data:
            inner = data["data"]
            if isinstance(inner, list):
                return [_transform(item) for item in inner]
            if inner is None:
                return None
            if isinstance(inner, dict):
                data = _flatten_attributes(inner)
        else:
            data = _flatten_attributes(data)
        return {key: _transform(value) for key, value in data.items()}

    return data


def normalize_data(results: Dict[str, Any]) -> Tuple[Dict[str, Any], Optional[Dict[str, Any]]]:
    """
    Normalize a content API result into flat records.

    Args:
        results: The ``data`` member of the API response, keyed by operation

    Returns:
        Tuple of (normalized data keyed by operation, first pagination meta found)
    """
    normalized: Dict[str, Any] = {}
    result_meta = None
    for key, value in results.items():
        if isinstance(value, dict):
            value = dict(value)
            meta = value.pop("meta", None)
            if meta and result_meta is None:
                result_meta = meta
        normalized[key] = _transform(value)
    return normalized, result_meta


def extract_error_info(errors: List[Dict[str, Any]]) -> Tuple[int, str]:
    """Map content API error entries to an HTTP status and message."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = ""

    for error in errors:
        extensions_error = (error.get("extensions") or {}).get("error") or {}
        name = error.get("name") or extensions_error.get("name")
        message = error.get("message") or extensions_error.get("message") or message

        if name == "UnauthorizedError":
            status_code = status.HTTP_401_UNAUTHORIZED
        elif name == "ForbiddenError":
            status_code = status.HTTP_403_FORBIDDEN
        elif name == "ValidationError":
            status_code = status.HTTP_400_BAD_REQUEST

    return status_code, message


class ContentApiClient:
    """Token-authenticated client for the content API."""

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the client.

        Args:
            token: Bearer token of the caller (defaults to the service token)
            base_url: GraphQL endpoint URL (defaults to settings)
            timeout: Request timeout in seconds (defaults to settings)
            transport: Optional httpx transport, used to plug in fakes
        """
        self.token = token or settings.CONTENT_API_TOKEN
        self.url = base_url or settings.CONTENT_API_URL
        self.timeout = timeout or settings.CONTENT_API_TIMEOUT
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def fetch(self, document: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Execute a query or mutation and return the normalized data.

        Raises:
            ContentApiError: If the request fails or the API reports errors
        """
        data, _ = await self.fetch_with_meta(document, variables)
        return data

    async def fetch_with_meta(
        self,
        document: str,
        variables: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, Any], Optional[Dict[str, Any]]]:
        payload = {"query": document, "variables": variables or {}}

        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
                response = await client.post(self.url, json=payload, headers=self._headers())
            body = response.json()
        except httpx.HTTPError as e:
            logger.error(f"#fetch: content API request failed: {type(e).__name__}: {str(e)}")
            raise ContentApiError(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                message="Content API is unreachable",
                code="CONTENT_API_UNAVAILABLE"
            ) from e
        except ValueError as e:
            logger.error(f"#fetch: content API returned a non-JSON body ({response.status_code})")
            raise ContentApiError(message="Content API returned an invalid response") from e

        errors = body.get("errors") or ([body["error"]] if body.get("error") else [])
        if errors or response.status_code >= 400:
            status_code, message = extract_error_info(errors)
            if not errors and response.status_code in (401, 403):
                status_code = response.status_code
            logger.error(f"#fetch: content API error {status_code}: {message or response.status_code}")
            raise ContentApiError(status_code=status_code, message=message or "Content API request failed")

        return normalize_data(body.get("data") or {})
