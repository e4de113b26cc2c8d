"""HTTP client for the goto API."""

from typing import Optional

import httpx


DEFAULT_API_URL = "http://127.0.0.1:8080"


class GotoError(Exception):
    """Base class for client-side failures."""


class CliError(GotoError):
    """The request was refused (4xx) or could not be built."""


class ApiError(GotoError):
    """The API failed (5xx) or could not be reached."""


class NoRedirection(GotoError):
    """The API answered a browse request without redirecting."""

    def __init__(self):
        super().__init__("no redirection")


class GotoClient:
    """Thin synchronous client over the redirect/registration routes."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize client.

        Args:
            base_url: Base URL of the API
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            follow_redirects=False,
        )

    def _send(self, method: str, path: str, content: Optional[str] = None) -> httpx.Response:
        try:
            response = self._client.request(method, path, content=content)
        except httpx.InvalidURL as e:
            raise CliError(str(e)) from e
        except httpx.HTTPError as e:
            raise ApiError(str(e)) from e

        if response.is_server_error:
            raise ApiError(response.text)
        if response.is_client_error:
            raise CliError(response.text)
        return response

    def create_new(self, shorturl: str, target: str) -> str:
        """Register target under shorturl; fails if it exists."""
        return self._send("POST", f"/{shorturl}", content=target).text

    def update_url(self, shorturl: str, target: str) -> str:
        """Register target under shorturl, replacing any previous target."""
        return self._send("PUT", f"/{shorturl}", content=target).text

    def shorten(self, target: str) -> str:
        """Register target under an identifier derived by the server."""
        return self._send("POST", "/", content=target).text

    def get_long_url(self, shorturl: str) -> str:
        """Resolve shorturl to its target without following the redirect."""
        response = self._send("GET", f"/{shorturl}")

        location = response.headers.get("location")
        if not response.is_redirect or location is None:
            raise NoRedirection()
        return location

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "GotoClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
