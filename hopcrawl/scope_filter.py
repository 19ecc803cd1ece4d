"""
Link Filter
===========
Site- and domain-restriction policies for discovered links.

Two independent exclusion rules, checked in order:

1. **site-restricted**   — the link must start with ``base_url`` as a literal
   string prefix.
2. **domain-restricted** — the link's host must equal the root host exactly.
   ``sub.example.com`` does **not** match ``example.com``.

Either, both, or neither may be active.

Public API
----------
- ``accept_link(link, base_url, root_domain, ...)`` — one-shot boolean check
- ``LinkFilter``                                   — per-crawl filter with counters
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .links import get_host

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------
# Standalone helper
# -----------------------------------------------------------------------

def accept_link(
    link: str,
    base_url: str,
    root_domain: Optional[str],
    *,
    site_restricted: bool = False,
    domain_restricted: bool = False,
) -> bool:
    """
    Return True if *link* passes the active restriction rules.

    Parameters
    ----------
    link : str
        Absolute, fragment-free candidate URL.
    base_url : str
        Prefix required when ``site_restricted`` is set.
    root_domain : str | None
        Host required when ``domain_restricted`` is set.
    """
    if site_restricted and not link.startswith(base_url):
        return False
    if domain_restricted and get_host(link) != root_domain:
        return False
    return True


# -----------------------------------------------------------------------
# LinkFilter — one instance per crawl
# -----------------------------------------------------------------------

@dataclass
class LinkFilter:
    """
    Restriction policy bound to one crawl's ``base_url``.

    ``root_domain`` is derived from ``base_url`` once at init.
    """

    base_url: str = ""
    site_restricted: bool = False
    domain_restricted: bool = False

    # --- computed at post-init ---
    root_domain: Optional[str] = field(init=False, default=None)
    site_rejected: int = field(init=False, default=0)
    domain_rejected: int = field(init=False, default=0)

    def __post_init__(self):
        self.root_domain = get_host(self.base_url)
        if self.domain_restricted and not self.root_domain:
            logger.warning(f"[SCOPE] No host in base URL '{self.base_url}'; every link will be rejected")

    def accept(self, link: str) -> bool:
        # Site rule alone first, so each rejection is counted against the rule that fired.
        if not accept_link(link, self.base_url, self.root_domain, site_restricted=self.site_restricted):
            self.site_rejected += 1
            return False
        if not accept_link(link, self.base_url, self.root_domain, domain_restricted=self.domain_restricted):
            self.domain_rejected += 1
            return False
        return True

    def filter(self, links: Iterable[str]) -> List[str]:
        """Return the accepted links, preserving order."""
        accepted = [link for link in links if self.accept(link)]
        if self.rejected:
            logger.info(
                f"[SCOPE] Rejected {self.rejected} link(s) "
                f"(site={self.site_rejected}, domain={self.domain_rejected})"
            )
        return accepted

    @property
    def rejected(self) -> int:
        return self.site_rejected + self.domain_rejected

    @property
    def scope_description(self) -> str:
        rules = []
        if self.site_restricted:
            rules.append(f"prefix {self.base_url}")
        if self.domain_restricted:
            rules.append(f"host {self.root_domain}")
        return "Restricted to " + " and ".join(rules) if rules else "Unrestricted"

    def log_scope(self) -> None:
        """Emit scope information to the logger."""
        logger.info(f"[SCOPE] {self.scope_description}")
