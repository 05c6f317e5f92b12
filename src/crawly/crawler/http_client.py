"""
HTTP transport for the crawler.

Thin wrapper over httpx.AsyncClient that applies the configured user agent,
timeout and TLS policy, and turns transport failures into FetchError.
"""

import httpx

from crawly.config.settings import CrawlConfig
from crawly.core.exceptions import ClientBuildError, FetchError
from crawly.utils.logging import get_logger

logger = get_logger(__name__)


class HttpFetcher:
    """
    Raw GET capability shared by the fetch unit and the robots cache.

    No robots, rate or mitigation policy is applied here.

    Example:
        >>> async with HttpFetcher.build(CrawlConfig()) as http:
        ...     response = await http.get("https://example.com/robots.txt")
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @classmethod
    def build(
        cls,
        config: CrawlConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "HttpFetcher":
        """
        Construct the underlying client from configuration.

        Args:
            config: Crawl configuration
            transport: Optional transport (tests pass httpx.MockTransport)

        Returns:
            Ready HttpFetcher

        Raises:
            ClientBuildError: If the client cannot be constructed
        """
        try:
            client = httpx.AsyncClient(
                headers={"User-Agent": config.user_agent},
                timeout=httpx.Timeout(config.request_timeout),
                follow_redirects=config.follow_redirects,
                verify=config.verify_tls,
                transport=transport,
            )
        except (OSError, ValueError, TypeError) as e:
            raise ClientBuildError(f"Could not build HTTP client: {e}") from e

        return cls(client)

    async def get(self, url: str) -> httpx.Response:
        """
        Issue a GET request and read the whole body.

        Args:
            url: Absolute URL

        Returns:
            Response of any status

        Raises:
            FetchError: If the request fails or the URL cannot be requested
                (bad port or invalid IDNA host)
        """
        try:
            return await self._client.get(url)
        except httpx.TimeoutException as e:
            raise FetchError(f"Request timed out: {e}", url=url) from e
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            # ValueError covers hosts that fail IDNA encoding
            raise FetchError(f"Request failed: {e}", url=url) from e

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpFetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
