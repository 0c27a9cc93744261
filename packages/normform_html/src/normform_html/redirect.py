from typing import Mapping, NoReturn
from urllib.parse import urlencode

from normform_core.config import normform_settings

from normform_html.exceptions import RedirectError


def build_redirect_url(
    location: str,
    query_parameters: Mapping[str, str] | None = None,
) -> str:
    """
    Append `query_parameters` to `location` as a URL-encoded query string.

    >>> build_redirect_url("/thanks", {"id": "42"})
    '/thanks?id=42'
    >>> build_redirect_url("/search?page=2", {"q": "a b"})
    '/search?page=2&q=a+b'
    """
    if query_parameters is None:
        return location
    sep = "&" if "?" in location else "?"
    return f"{location}{sep}{urlencode(query_parameters)}"


def redirect_to(
    location: str,
    query_parameters: Mapping[str, str] | None = None,
) -> NoReturn:
    """
    End the current request with a redirect to `location`.

    This never returns: it raises `RedirectError`, which the form endpoint
    turns into a `RedirectResponse`. Code placed after the call does not run.
    """
    raise RedirectError(
        build_redirect_url(location, query_parameters),
        status_code=normform_settings.REDIRECT_STATUS_CODE,
    )


__all__ = ["build_redirect_url", "redirect_to"]
