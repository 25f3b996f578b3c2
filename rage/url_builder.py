"""URL materialization for requests.

Joins the base URL with the method path, substitutes {name} placeholders
from path parameters and appends query parameters.
"""

from __future__ import annotations

import re
from urllib.parse import quote

import httpx

# Control characters httpx rejects with InvalidURL.
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


class UrlBuildError(ValueError):
    """Raised when a request has no usable URL."""


def render_path(path_template: str, path_parameters: dict[str, str]) -> str:
    """Substitute {name} placeholders. Unknown placeholders are left as-is."""
    rendered = path_template
    for key, value in path_parameters.items():
        rendered = rendered.replace(f"{{{key}}}", quote(value, safe=""))
    return rendered


def join_url(base_url: str, path: str | None) -> str:
    """Join base and path with exactly one slash between them."""
    if not path:
        return base_url
    if not base_url:
        return path
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def _percent_encode_control_chars(url: str) -> str:
    return _CONTROL_CHARS.sub(lambda m: f"%{ord(m.group()):02X}", url)


def _parse_absolute(raw: str) -> httpx.URL:
    try:
        url = httpx.URL(_percent_encode_control_chars(raw))
    except httpx.InvalidURL as e:
        raise UrlBuildError(f"Invalid URL '{raw}': {e}") from e
    if not url.scheme or not url.host:
        raise UrlBuildError(f"URL must be absolute, got '{raw}'")
    return url


def build_url(
    base_url: str | None,
    method_path: str | None,
    path_parameters: dict[str, str],
    query_parameters: dict[str, str],
) -> httpx.URL:
    """Build the absolute URL for a request.

    The method path is appended to the base URL's path; a query string
    already present on the base URL is kept.

    Raises:
        UrlBuildError: If there is no base URL or the result is not a valid URL.
    """
    if not base_url:
        raise UrlBuildError("Base URL is not set")

    url = _parse_absolute(base_url)

    if method_path:
        path = _percent_encode_control_chars(render_path(method_path, path_parameters))
        try:
            url = url.copy_with(path=join_url(url.path, path))
        except httpx.InvalidURL as e:
            raise UrlBuildError(f"Invalid path '{path}': {e}") from e

    if query_parameters:
        url = url.copy_merge_params(query_parameters)
    return url


def split_url(url: str) -> tuple[str, str | None, dict[str, str]]:
    """Split an absolute URL into origin, path template and query parameters.

    The path keeps its {name} placeholders so they can be filled from path
    parameters. URLs that are not absolute come back unchanged as the origin.
    """
    try:
        parsed = _parse_absolute(url)
    except UrlBuildError:
        return url, None, {}
    origin = f"{parsed.scheme}://{parsed.netloc.decode('ascii')}"
    path = parsed.path if parsed.path != "/" else None
    return origin, path, dict(parsed.params.items())
