"""Tests for the reCAPTCHA script tag builder."""

from recaptcha_v3.script import get_script_tag, render_script_tag


def test_script_tag_without_defer():
    """Test the tag references the site key and has no defer attribute."""
    tag = get_script_tag("SITEKEY123", defer=False)

    assert "render=SITEKEY123" in tag
    assert "defer" not in tag
    assert tag == (
        '<script src="https://www.google.com/recaptcha/api.js?render=SITEKEY123">'
        "</script>"
    )


def test_script_tag_with_defer():
    """Test the defer attribute is present by default."""
    tag = get_script_tag("SITEKEY123")

    assert "render=SITEKEY123" in tag
    assert tag.endswith(" defer></script>")


def test_script_tag_escapes_site_key():
    """Test that a hostile site key cannot break out of the attribute."""
    tag = get_script_tag('"><script>alert(1)</script>', defer=False)

    assert "<script>alert" not in tag
    assert tag.count("<script") == 1


def test_render_script_tag_headers():
    """Test the rendered response carries html content type and cache policy."""
    rendered = render_script_tag("SITEKEY123", defer=False)

    assert rendered.status_code == 200
    assert rendered.body == get_script_tag("SITEKEY123", defer=False)
    assert rendered.headers["Cache-Control"] == (
        "no-transform,public,max-age=300,s-maxage=900"
    )
    assert rendered.media_type == "text/html; charset=UTF-8"
