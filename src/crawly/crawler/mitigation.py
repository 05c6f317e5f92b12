"""
Bot-mitigation detection.

Edge-security services answer automated clients with a challenge page and
mark the response with a header. Such responses are skipped, never parsed
and never reported as errors.
"""

from collections.abc import Mapping

from crawly.utils.logging import get_logger

logger = get_logger(__name__)

# Cloudflare sets "cf-mitigated: challenge" on challenge responses
DEFAULT_MITIGATION_HEADERS = ("cf-mitigated",)


class MitigationDetector:
    """
    Classifies a response as blocked by bot mitigation.

    Detection is header based and ignores the status code: a challenge may
    come back as 403, 503 or even 200.

    Example:
        >>> detector = MitigationDetector()
        >>> detector.check({"cf-mitigated": "challenge"})
        True
        >>> detector.check({"content-type": "text/html"})
        False
    """

    def __init__(self, header_names: tuple[str, ...] = DEFAULT_MITIGATION_HEADERS) -> None:
        """
        Initialize detector.

        Args:
            header_names: Header names whose presence marks a mitigated response
        """
        self.header_names = frozenset(name.strip().lower() for name in header_names)

    def signal(self, headers: Mapping[str, str]) -> str | None:
        """
        Find the mitigation header present in a response.

        Args:
            headers: Response headers (any case)

        Returns:
            Name of the matching header, or None
        """
        for name in headers.keys():
            if name.lower() in self.header_names:
                return name.lower()
        return None

    def check(self, headers: Mapping[str, str]) -> bool:
        """
        Check whether a response carries a mitigation signal.

        Args:
            headers: Response headers (any case)

        Returns:
            True if the response must be skipped
        """
        return self.signal(headers) is not None
