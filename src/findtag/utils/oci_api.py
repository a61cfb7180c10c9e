import json
import logging
from typing import Any
from dataclasses import dataclass

import httpx

from findtag.exceptions import (
    AuthenticationError,
    RegistryError,
    RegistryHTTPError,
    TransportError,
)

MANIFEST_V2 = "application/vnd.docker.distribution.manifest.v2+json"


@dataclass(frozen=True)
class RegistryResponse:
    url: str
    status_code: int | None = None
    body: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status_code == 200

    @property
    def transport_failed(self) -> bool:
        return self.error is not None

    def json(self) -> Any:
        try:
            return json.loads(self.body)
        except ValueError as e:
            raise RegistryError(f"Invalid JSON from: {self.url}: {e}") from e


def open_client(
    timeout: float, transport: httpx.AsyncBaseTransport | None = None
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=timeout,
        headers={"Content-Type": "application/json;charset=UTF-8"},
        follow_redirects=True,
        transport=transport,
    )


async def registry_get(
    client: httpx.AsyncClient,
    url: str,
    headers: dict[str, str] | None = None,
    params: dict[str, str] | None = None,
) -> RegistryResponse:
    try:
        r = await client.get(url, headers=headers, params=params)
    except httpx.RequestError as e:
        return RegistryResponse(url, error=f"{type(e).__name__}: {e}")

    return RegistryResponse(str(r.url), r.status_code, r.text)


def _raise_for_status(response: RegistryResponse) -> None:
    if response.transport_failed:
        raise TransportError(f"{response.url}: {response.error}")

    if not response.ok:
        logging.debug(
            f"Error {response.status_code} from: {response.url}"
            f"\nHTTP_BODY: {response.body}"
        )
        if response.status_code == 401:
            raise AuthenticationError(
                f"Error 401 from: {response.url}, token rejected or expired"
            )
        raise RegistryHTTPError(response.status_code or 0, response.url)


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def get_token(
    client: httpx.AsyncClient,
    auth_url: str,
    service: str,
    repository: str,
) -> str:
    response = await registry_get(
        client,
        f"{auth_url.rstrip('/')}/token",
        params={
            "service": service.lstrip("/"),
            "scope": f"repository:{repository}:pull",
        },
    )
    try:
        _raise_for_status(response)
    except RegistryHTTPError as e:
        raise AuthenticationError(str(e)) from e

    token_json = response.json()
    token = None
    if isinstance(token_json, dict):
        token = token_json.get("token") or token_json.get("access_token")
    if not token:
        raise AuthenticationError(
            f"Token endpoint returned no token: {response.url}"
        )

    return token


async def list_tags(
    client: httpx.AsyncClient,
    registry_url: str,
    repository: str,
    token: str,
) -> list[str]:
    response = await registry_get(
        client,
        f"{registry_url.rstrip('/')}/{repository}/tags/list",
        headers=_bearer(token),
    )
    _raise_for_status(response)

    result = response.json()
    if not isinstance(result, dict):
        raise RegistryError(f"Unexpected tag list from: {response.url}")

    return result.get("tags") or []


async def get_digest(
    client: httpx.AsyncClient,
    registry_url: str,
    repository: str,
    tag: str,
    token: str,
    ignore_404: bool = False,
) -> str | None:
    """Return the config digest of `repository:tag`.

    With `ignore_404`, a missing manifest yields None instead of an
    error. Some platform-variant tags are listed but have no v2
    manifest.
    """
    response = await registry_get(
        client,
        f"{registry_url.rstrip('/')}/{repository}/manifests/{tag}",
        headers={**_bearer(token), "Accept": MANIFEST_V2},
    )
    if ignore_404 and response.status_code == 404:
        logging.debug(f"{repository}:{tag}: No manifest (404), skipping.")
        return None

    _raise_for_status(response)

    manifest = response.json()
    config = manifest.get("config") if isinstance(manifest, dict) else None
    if not isinstance(config, dict):
        return None

    return config.get("digest") or None
