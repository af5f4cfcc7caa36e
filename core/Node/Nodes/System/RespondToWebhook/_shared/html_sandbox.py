"""
HTML sandboxing for webhook responses.

Bodies that a browser would render as HTML are escaped into the srcdoc of a
sandboxed iframe, so markup supplied through the workflow cannot run scripts
against the host origin.
"""

from typing import Optional

from markupsafe import escape

HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")

# No allow-scripts and no allow-same-origin
SANDBOX_PERMISSIONS = " ".join([
    "allow-forms",
    "allow-popups",
    "allow-modals",
    "allow-orientation-lock",
    "allow-pointer-lock",
    "allow-presentation",
    "allow-popups-to-escape-sandbox",
    "allow-top-navigation-by-user-activation",
])

IFRAME_STYLE = (
    "position:fixed; top:0; left:0; width:100vw; height:100vh; "
    "border:none; overflow:hidden;"
)


def is_html_rendered_content_type(content_type: Optional[str]) -> bool:
    """True for content types browsers render as HTML."""
    if not content_type:
        return False
    return str(content_type).strip().lower().startswith(HTML_CONTENT_TYPES)


def sandbox_html_response(html: str) -> str:
    """Wrap `html` in a sandboxed iframe document."""
    return (
        f'<iframe srcdoc="{escape(html)}" sandbox="{SANDBOX_PERMISSIONS}" '
        f'style="{IFRAME_STYLE}" allowtransparency="true"></iframe>'
    )
