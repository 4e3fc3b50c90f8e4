"""
Landing page served for requests without an owner.
"""

import logging
import os

logger = logging.getLogger("pages.landing")

DEFAULT_LANDING_PAGE = b"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Pages</title></head>
<body>
<h1>Pages</h1>
<p>Static websites served straight from your git repositories.</p>
<p>Push your site to a repository named <code>pages</code> and visit
<code>https://{user}.{domain}/</code>.</p>
</body>
</html>
"""


def load_landing_page(path: str) -> bytes:
    """
    Read the landing page from `path`, or return the built-in page.
    """
    if not path:
        return DEFAULT_LANDING_PAGE
    if not os.path.isfile(path):
        logger.warning(f"Landing page not found at {path}, using built-in page")
        return DEFAULT_LANDING_PAGE
    with open(path, "rb") as f:
        return f.read()
