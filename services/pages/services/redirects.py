"""
`_redirects` file support.

A tenant may ship a `_redirects` file at its repository root:

    # from          to                  [status]
    /old-page       /new-page           301
    /blog/*         /posts/:splat       302

It is consulted only when the requested file and its `.html` variant do not
exist. Rewrites (status 200) are not supported and are skipped.
"""

import logging
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger("pages.redirects")

REDIRECTS_FILE = "_redirects"

DEFAULT_REDIRECT_STATUS = 301
REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})

SPLAT = ":splat"


class RedirectRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str
    target: str
    status_code: int = DEFAULT_REDIRECT_STATUS


def parse_redirects(content: bytes) -> List[RedirectRule]:
    """
    Parse a `_redirects` file into rules, in file order.

    Comments, short lines and rules with unsupported statuses are skipped.
    """
    rules: List[RedirectRule] = []
    for line in content.decode("utf-8", errors="replace").splitlines():
        fields = line.split()
        if line.lstrip().startswith("#") or len(fields) < 2:
            continue

        status_code = DEFAULT_REDIRECT_STATUS
        if len(fields) >= 3:
            try:
                status_code = int(fields[2])
            except ValueError:
                logger.info(f"Invalid status in {REDIRECTS_FILE}: {fields[2]!r}, using 301")

        if status_code not in REDIRECT_STATUSES:
            logger.debug(f"Skipping {REDIRECTS_FILE} rule with status {status_code}")
            continue

        rules.append(RedirectRule(source=fields[0], target=fields[1], status_code=status_code))
    return rules


def match_redirect(rules: List[RedirectRule], request_path: str) -> Optional[RedirectRule]:
    """
    Find the first rule matching `request_path`.

    Exact rules ignore trailing slashes. Rules ending in `/*` match any path
    below their prefix; `:splat` in the target receives the matched remainder.

    Returns:
        A rule whose `target` is the final redirect location, or None
    """
    for rule in rules:
        if rule.source.rstrip("/") == request_path.rstrip("/"):
            return rule

        if rule.source.endswith("/*"):
            prefix = rule.source[: -len("/*")]
            if request_path == prefix or request_path.startswith(prefix + "/"):
                splat = request_path[len(prefix) :].lstrip("/")
                return RedirectRule(
                    source=rule.source,
                    target=rule.target.replace(SPLAT, splat),
                    status_code=rule.status_code,
                )
    return None
