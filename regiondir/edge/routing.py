"""
Host -> origin path decision for the edge router.

The decision is a closed table: a few ordered passthrough rules, then one
rewrite template. It never checks that a region exists; an unknown slug is
rewritten like any other and the origin answers with its own not-found page.

  www.example.com/about                 -> PASSTHROUGH /about
  reeves-county-texas.example.com/      -> REWRITE     /region/reeves-county-texas/
  reeves-county-texas.example.com/faq   -> REWRITE     /region/reeves-county-texas/faq
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import AbstractSet, Callable, Optional, Tuple

from ..pages import REGION_PAGE_PREFIX
from ..regions import is_valid_slug

PASSTHROUGH = "passthrough"
REWRITE = "rewrite"


@dataclass(frozen=True)
class RouteDecision:
    action: str
    upstream_path: str
    label: Optional[str] = None
    reason: str = ""


def normalize_host(host: str) -> str:
    h = (host or "").strip().lower()
    if h.startswith("["):
        # IPv6 literal, with or without port
        return h.split("]", 1)[0] + "]"
    return h.split(":", 1)[0].rstrip(".")


def leftmost_label(host: str) -> str:
    return host.split(".", 1)[0] if host else ""


def _is_ip_literal(host: str) -> bool:
    try:
        ipaddress.ip_address(host.strip("[]"))
        return True
    except ValueError:
        return False


def rewrite_path(label: str, path: str) -> str:
    if not path.startswith("/"):
        path = "/" + path
    return f"{REGION_PAGE_PREFIX}{label}{path}"


def _with_query(path: str, query: str) -> str:
    return f"{path}?{query}" if query else path


# (reason, predicate(host, label, reserved, base_domain)); first match passes through.
_Rule = Tuple[str, Callable[[str, str, AbstractSet[str], str], bool]]

PASSTHROUGH_RULES: Tuple[_Rule, ...] = (
    ("no host", lambda host, label, reserved, base: not host),
    ("ip literal", lambda host, label, reserved, base: _is_ip_literal(host)),
    ("single label host", lambda host, label, reserved, base: "." not in host),
    ("apex domain", lambda host, label, reserved, base: bool(base) and host == base),
    ("foreign host", lambda host, label, reserved, base: bool(base) and not host.endswith("." + base)),
    ("reserved label", lambda host, label, reserved, base: label in reserved),
    # Only slug-shaped labels reach the upstream path; "%2e%2e" or "a_b" never do.
    ("invalid region label", lambda host, label, reserved, base: not is_valid_slug(label)),
)


def decide_route(
    host: str,
    path: str,
    query: str = "",
    *,
    reserved: AbstractSet[str],
    base_domain: str = "",
) -> RouteDecision:
    h = normalize_host(host)
    label = leftmost_label(h)
    base = (base_domain or "").strip().lower().strip(".")
    path = path or "/"

    for reason, matches in PASSTHROUGH_RULES:
        if matches(h, label, reserved, base):
            return RouteDecision(PASSTHROUGH, _with_query(path, query), label=label or None, reason=reason)

    return RouteDecision(REWRITE, _with_query(rewrite_path(label, path), query), label=label, reason="region label")
