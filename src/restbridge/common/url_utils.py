"""
RestBridge URL Utilities

Shared URL splitting, query handling and percent-encoding helpers.
"""

from urllib.parse import parse_qsl, quote, unquote, urlencode, urlsplit, urlunsplit
from typing import Iterable, List, Optional, Tuple


# Characters encodeURIComponent leaves alone
_COMPONENT_SAFE = "-_.!~*'()"


class URLTools:
    """URL helpers shared by the cURL parser, the resolver and the generators."""

    @staticmethod
    def split_url(url: str) -> Optional[Tuple[str, str, str, str]]:
        """
        Split an absolute URL into (scheme, netloc, path, query).

        Args:
            url: URL to split

        Returns:
            Tuple of components, or None if the URL has no scheme or host
        """
        try:
            parsed = urlsplit(url)
        except ValueError:
            return None

        if not parsed.scheme or not parsed.netloc:
            return None

        return parsed.scheme, parsed.netloc, parsed.path or '/', parsed.query

    @staticmethod
    def parse_absolute(url: str) -> Optional[Tuple[str, str, str, str]]:
        """
        Split a URL, retrying with an https:// prefix when it has no scheme.

        Returns:
            Tuple of (scheme, netloc, path, query), or None if still unparseable
        """
        parts = URLTools.split_url(url)
        if parts is None and '://' not in url:
            parts = URLTools.split_url(f"https://{url}")
        return parts

    @staticmethod
    def query_pairs(query: str) -> List[Tuple[str, str]]:
        """Decode a query string into ordered (key, value) pairs, keeping blanks."""
        return parse_qsl(query, keep_blank_values=True)

    @staticmethod
    def append_query(url: str, pairs: Iterable[Tuple[str, str]]) -> str:
        """
        Append query pairs to a URL, after any query it already carries.

        The URL may still contain unresolved placeholders, so it is not
        re-parsed; the pairs are encoded and joined onto the existing text.
        """
        pairs = list(pairs)
        if not pairs:
            return url

        fragment = ''
        if '#' in url:
            url, fragment = url.split('#', 1)
            fragment = '#' + fragment

        encoded = urlencode(pairs)
        if '?' not in url:
            separator = '?'
        elif url.endswith('?') or url.endswith('&'):
            separator = ''
        else:
            separator = '&'

        return f"{url}{separator}{encoded}{fragment}"

    @staticmethod
    def origin_and_path(scheme: str, netloc: str, path: str) -> str:
        """Rebuild scheme://netloc/path without query or fragment."""
        return urlunsplit((scheme, netloc, path or '/', '', ''))


def encode_component(value: str) -> str:
    """Percent-encode a value the way encodeURIComponent does."""
    return quote(value, safe=_COMPONENT_SAFE)


def decode_component(value: str) -> str:
    """Percent-decode a value; '+' is left as is."""
    return unquote(value)


def encode_form(pairs: Iterable[Tuple[str, str]]) -> str:
    """Encode pairs as an x-www-form-urlencoded string."""
    return '&'.join(f"{encode_component(k)}={encode_component(v)}" for k, v in pairs)
