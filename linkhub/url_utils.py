from urllib.parse import quote, urlencode, urlparse, urlunparse

PREVIEW_ENDPOINT = "https://s0.wp.com/mshots/v1/"


def clean_endpoint_url(url: str) -> str:
    """
    Strip query string and fragment from the store endpoint:
    - https://host/macros/s/ID/exec?foo=1 -> https://host/macros/s/ID/exec
    - anything that does not parse as an absolute URL is returned as given
    """
    parsed = urlparse(url.strip())
    if not parsed.scheme or not parsed.netloc:
        return url
    return urlunparse((parsed.scheme, parsed.netloc, parsed.path, "", "", ""))


def build_read_url(endpoint: str, cache_buster: str) -> str:
    query = urlencode({"action": "getData", "t": cache_buster})
    return f"{clean_endpoint_url(endpoint)}?{query}"


def preview_url(url: str, width: int = 800) -> str:
    """Screenshot thumbnail shown on link cards when previews are enabled."""
    return f"{PREVIEW_ENDPOINT}{quote(url, safe='')}?w={width}"
