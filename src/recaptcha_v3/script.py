"""Script tag for loading the reCAPTCHA v3 JavaScript API in a browser."""

from html import escape
from urllib.parse import quote

from .types import CACHE_CONTROL, RenderedResponse

SCRIPT_URL = "https://www.google.com/recaptcha/api.js"


def get_script_tag(site_key: str, defer: bool = True) -> str:
    """
    Build the html script tag including Google's reCAPTCHA v3 javascript.

    Args:
        site_key: Public reCAPTCHA key
        defer: Include the defer attribute to load the script lazily

    Returns:
        Script tag string

    Example:
        >>> get_script_tag("SITEKEY123", defer=False)
        '<script src="https://www.google.com/recaptcha/api.js?render=SITEKEY123"></script>'
    """
    src = escape(f"{SCRIPT_URL}?render={quote(site_key, safe='')}")
    attributes = " defer" if defer else ""
    return f'<script src="{src}"{attributes}></script>'


def render_script_tag(site_key: str, defer: bool = True) -> RenderedResponse:
    """Wrap the script tag in an html response with the fixed cache policy."""
    return RenderedResponse(
        body=get_script_tag(site_key, defer=defer),
        headers={
            "Cache-Control": CACHE_CONTROL,
            "Content-Type": "text/html; charset=UTF-8",
        },
    )
