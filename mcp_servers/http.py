"""JSON-over-HTTP helpers for backend clients."""

import logging
from typing import Any

import httpx

from .errors import APIError, BackendError

# Statuses treated as success
OK_CODES = {200, 201}


async def request_json(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    json: Any = None,
    params: dict | None = None,
    headers: dict[str, str] | None = None,
) -> dict:
    """
    Send a request and decode the JSON response.

    Non-success responses are expected to carry a JSON error body
    ({"code": ..., "message": ...}) and are raised as APIError.
    Transport failures and undecodable bodies are raised as BackendError.
    """
    if not method:
        raise ValueError("method is required")
    if not url:
        raise ValueError("url is required")

    try:
        response = await client.request(method, url, json=json, params=params, headers=headers)
    except httpx.HTTPError as e:
        raise BackendError(f"error sending request: {e}") from e

    if response.status_code not in OK_CODES:
        try:
            body = response.json()
        except ValueError as e:
            raise BackendError(
                f"unexpected status code: {response.status_code}. "
                f"Also, error response was not JSON: {e}"
            ) from e
        raise APIError(
            response.status_code,
            body.get("code", ""),
            body.get("message", response.reason_phrase),
        )

    try:
        return response.json()
    except ValueError as e:
        raise BackendError(f"error decoding JSON: {e}") from e


def debug_event_hooks(log: logging.Logger) -> dict[str, list]:
    """Build httpx event hooks that log full requests and responses."""

    async def log_request(request: httpx.Request) -> None:
        body = request.content.decode("utf-8", errors="replace")
        log.debug(f"> {request.method} {request.url}\n{body}")

    async def log_response(response: httpx.Response) -> None:
        await response.aread()
        log.debug(f"< {response.status_code} {response.request.url}\n{response.text}")

    return {"request": [log_request], "response": [log_response]}
