import httpx
import pytest
from typing import Any, Callable
from findtag.utils.oci_api import open_client

REGISTRY = "https://registry.test/v2"
AUTH = "https://auth.test"
TOKEN = "secret-token"


class FakeRegistry:
    """Minimal token service plus registry API backed by a dict."""

    def __init__(
        self,
        digests: dict[str, str | None],
        tags: list[str] | None = None,
        repository: str = "library/nginx",
    ) -> None:
        self.digests = digests
        self.tags = list(digests) if tags is None else tags
        self.repository = repository
        self.token_status = 200
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = f"{request.url.scheme}://{request.url.host}{request.url.path}"

        if url == f"{AUTH}/token":
            if self.token_status != 200:
                return httpx.Response(self.token_status, text="denied")
            return httpx.Response(200, json={"token": TOKEN})

        if request.headers.get("Authorization") != f"Bearer {TOKEN}":
            return httpx.Response(401, json={"errors": []})

        base = f"{REGISTRY}/{self.repository}"
        if url == f"{base}/tags/list":
            return httpx.Response(
                200, json={"name": self.repository, "tags": self.tags}
            )

        if url.startswith(f"{base}/manifests/"):
            tag = url.rsplit("/", 1)[1]
            if (digest := self.digests.get(tag)) is None:
                return httpx.Response(404, json={"errors": []})
            return httpx.Response(
                200,
                json={"schemaVersion": 2, "config": {"digest": digest}},
            )

        return httpx.Response(404)

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]


@pytest.fixture
def make_client() -> Callable[[Any], httpx.AsyncClient]:
    def factory(handler: Any) -> httpx.AsyncClient:
        return open_client(10, transport=httpx.MockTransport(handler))

    return factory
