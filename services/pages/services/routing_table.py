"""
Routing table loader.

Loads routing.yml into an immutable RoutingTable once at start-up.

Example routing.yml:

    subdomains:
      docs: {owner: codeberg, repository: documentation, cors: false}
    reserved_names: [admin, api, www]
    raw_reserved_names: [api, user]
    allowed_cors_domains: [fonts.codeberg.org]

Keys left out keep their built-in defaults.
"""

import logging

import yaml
from pydantic import ValidationError

from ..models import RoutingTable

logger = logging.getLogger(__name__)


def load_routing_table(config_path: str) -> RoutingTable:
    """
    Load the routing table from `config_path`.

    A missing file or an invalid document falls back to the built-in defaults.
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning(f"Routing config not found at {config_path}, using defaults")
        return RoutingTable()
    except yaml.YAMLError as e:
        logger.error(f"Error parsing routing config: {e}")
        return RoutingTable()

    if not isinstance(cfg, dict):
        logger.error(f"Routing config at {config_path} is not a mapping, using defaults")
        return RoutingTable()

    # An explicit empty key means "none", not "defaults".
    fields = {key: value for key, value in cfg.items() if key in RoutingTable.model_fields}
    for key, value in fields.items():
        if value is None:
            fields[key] = {} if key == "subdomains" else []

    try:
        table = RoutingTable(**fields)
    except ValidationError as e:
        logger.error(f"Invalid routing config at {config_path}: {e}")
        return RoutingTable()

    logger.info(
        f"Loaded routing table from {config_path}",
        extra={
            "subdomains": len(table.subdomains),
            "reserved_names": len(table.reserved_names),
            "raw_reserved_names": len(table.raw_reserved_names),
        },
    )
    return table
