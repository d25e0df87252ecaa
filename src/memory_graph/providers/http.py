"""Shared HTTP plumbing for the remote providers.

All remote calls go through :func:`post_json`, which turns every way a
request can go wrong into one of the provider error kinds so callers can
tell a dead network from a rejected request from a garbled answer.
"""

from __future__ import annotations

import logging
from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from memory_graph.errors import (
    ProviderDecodeError,
    ProviderResponseError,
    ProviderTransportError,
)

logger = logging.getLogger(__name__)

ResponseT = TypeVar("ResponseT", bound=BaseModel)


def build_client(
    base_url: str,
    *,
    headers: dict[str, str],
    timeout: float,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the async client a provider owns for its lifetime."""
    return httpx.AsyncClient(
        base_url=base_url.rstrip("/"),
        headers={"Content-Type": "application/json", "Accept": "application/json", **headers},
        timeout=timeout,
        transport=transport,
    )


async def post_json(
    client: httpx.AsyncClient,
    path: str,
    payload: BaseModel,
    response_model: type[ResponseT],
    *,
    provider: str,
    operation: str,
    timeout: float | None = None,
) -> ResponseT:
    """POST *payload* to *path* and decode the body into *response_model*.

    Raises
    ------
    ProviderTransportError
        Connection failure, timeout, or any other transport-level error.
    ProviderResponseError
        Non-2xx status; carries the status code and raw body.
    ProviderDecodeError
        The body is not valid JSON or does not match *response_model*.
    """
    request_kwargs: dict = {"json": payload.model_dump(mode="json", by_alias=True, exclude_none=True)}
    if timeout is not None:
        request_kwargs["timeout"] = timeout

    try:
        response = await client.post(path, **request_kwargs)
    except httpx.TimeoutException as exc:
        logger.error("%s %s: request to %s timed out", provider, operation, path)
        raise ProviderTransportError(
            f"request to {path} timed out", provider=provider, operation=operation
        ) from exc
    except httpx.TransportError as exc:
        logger.error("%s %s: failed to send request to %s: %s", provider, operation, path, exc)
        raise ProviderTransportError(
            f"failed to send request to {path}: {exc}", provider=provider, operation=operation
        ) from exc

    if not response.is_success:
        logger.error(
            "%s %s: API error status_code=%d body=%s",
            provider,
            operation,
            response.status_code,
            response.text,
        )
        raise ProviderResponseError(
            response.status_code,
            response.text,
            provider=provider,
            operation=operation,
            reason=response.reason_phrase,
        )

    try:
        return response_model.model_validate_json(response.content)
    except ValidationError as exc:
        logger.error("%s %s: failed to decode response: %s", provider, operation, exc)
        raise ProviderDecodeError(
            f"failed to decode response: {exc}", provider=provider, operation=operation
        ) from exc
