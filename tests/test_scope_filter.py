"""
Tests for site- and domain-restriction filtering.
"""

from hopcrawl.scope_filter import LinkFilter, accept_link


# ====================================================================
# 1. accept_link
# ====================================================================

class TestAcceptLink:

    def test_unrestricted_accepts_everything(self):
        assert accept_link("https://y.com/a", "https://x.com", "x.com") is True
        assert accept_link("mailto:me@x.com", "https://x.com", "x.com") is True

    def test_site_restriction(self):
        kw = dict(site_restricted=True)
        assert accept_link("https://x.com/a", "https://x.com", "x.com", **kw) is True
        assert accept_link("https://y.com/a", "https://x.com", "x.com", **kw) is False

    def test_site_restriction_is_literal_prefix(self):
        """A plain string prefix: x.com.evil.org passes, http:// does not."""
        kw = dict(site_restricted=True)
        assert accept_link("https://x.com.evil.org/", "https://x.com", "x.com", **kw) is True
        assert accept_link("http://x.com/a", "https://x.com", "x.com", **kw) is False

    def test_domain_restriction_exact_host(self):
        kw = dict(domain_restricted=True)
        assert accept_link("https://x.com/a", "https://x.com", "x.com", **kw) is True
        assert accept_link("http://x.com/a", "https://x.com", "x.com", **kw) is True
        assert accept_link("https://sub.x.com/a", "https://x.com", "x.com", **kw) is False

    def test_both_rules(self):
        kw = dict(site_restricted=True, domain_restricted=True)
        base = "https://x.com/docs"
        assert accept_link("https://x.com/docs/a", base, "x.com", **kw) is True
        assert accept_link("https://x.com/blog", base, "x.com", **kw) is False
        assert accept_link("https://y.com/docs/a", base, "x.com", **kw) is False


# ====================================================================
# 2. LinkFilter
# ====================================================================

class TestLinkFilter:

    def test_root_domain_derived_from_base_url(self):
        lf = LinkFilter(base_url="https://x.com/docs")
        assert lf.root_domain == "x.com"

    def test_filter_preserves_order_and_counts(self):
        lf = LinkFilter(base_url="https://x.com", domain_restricted=True)
        links = ["https://x.com/a", "https://sub.x.com/b", "https://x.com/c", "https://y.com/d"]
        assert lf.filter(links) == ["https://x.com/a", "https://x.com/c"]
        assert lf.domain_rejected == 2
        assert lf.site_rejected == 0
        assert lf.rejected == 2

    def test_site_rule_short_circuits(self):
        lf = LinkFilter(base_url="https://x.com", site_restricted=True, domain_restricted=True)
        assert lf.accept("https://y.com/a") is False
        assert lf.site_rejected == 1
        assert lf.domain_rejected == 0

    def test_scope_description(self):
        assert LinkFilter(base_url="https://x.com").scope_description == "Unrestricted"
        lf = LinkFilter(base_url="https://x.com", site_restricted=True, domain_restricted=True)
        assert lf.scope_description == "Restricted to prefix https://x.com and host x.com"
