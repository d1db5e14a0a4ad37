"""Remote GET collaborator used to fetch image bytes.

The dimension extractor only depends on the ``RemoteGetRequest`` protocol,
so tests swap in ``StubbedRemoteGetRequest`` with canned responses.
"""

from dataclasses import dataclass, field
from typing import Protocol

import requests

from .config import DEFAULT_USER_AGENT
from .errors import FailedToGetFromRemoteUrl, StubConfigurationError

CHUNK_SIZE = 64 * 1024


@dataclass
class Response:
    """Result of a remote GET."""

    url: str
    status: int = 200
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def content_type(self) -> str:
        for name, value in self.headers.items():
            if name.lower() == "content-type":
                return value
        return ""


class RemoteGetRequest(Protocol):
    """Anything that can GET a URL."""

    def get(self, url: str) -> Response:
        """Retrieve the contents of a remote URL.

        Raises:
            FailedToGetFromRemoteUrl: If retrieving the contents failed.
        """
        ...


class RequestsRemoteGetRequest:
    """``RemoteGetRequest`` backed by a shared ``requests.Session``."""

    def __init__(
        self,
        timeout: float = 15.0,
        max_bytes: int = 10 * 1024 * 1024,
        user_agent: str = DEFAULT_USER_AGENT,
        session: requests.Session | None = None,
    ):
        self.timeout = timeout
        self.max_bytes = max_bytes
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", user_agent)

    def get(self, url: str) -> Response:
        try:
            resp = self.session.get(url, timeout=self.timeout, stream=True)
        except requests.RequestException as exc:
            raise FailedToGetFromRemoteUrl(url, reason=str(exc)) from exc

        with resp:
            if not 200 <= resp.status_code < 300:
                raise FailedToGetFromRemoteUrl(url, status=resp.status_code)

            body = bytearray()
            try:
                for chunk in resp.iter_content(CHUNK_SIZE):
                    body.extend(chunk)
                    if len(body) > self.max_bytes:
                        raise FailedToGetFromRemoteUrl(
                            url, reason=f"response larger than {self.max_bytes} bytes"
                        )
            except requests.RequestException as exc:
                raise FailedToGetFromRemoteUrl(url, reason=str(exc)) from exc

            return Response(
                url=url,
                status=resp.status_code,
                headers=dict(resp.headers),
                body=bytes(body),
            )


class StubbedRemoteGetRequest:
    """Stub for simulating remote requests.

    Args:
        argument_map: URL -> canned result. A ``bytes`` value is served as a
            200 response body; a ``Response`` is returned as is; an exception
            instance is raised.
    """

    def __init__(self, argument_map: dict):
        self.argument_map = argument_map
        self.requested: list[str] = []

    def get(self, url: str) -> Response:
        if url not in self.argument_map:
            raise StubConfigurationError(url)

        self.requested.append(url)
        result = self.argument_map[url]
        if isinstance(result, BaseException):
            raise result
        if isinstance(result, Response):
            return result
        return Response(url=url, body=bytes(result))
