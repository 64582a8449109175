"""Tests for static path resolution."""

from sitehook.config import SiteConfig
from sitehook.site.static import SiteHandler


class TestResolve:
    def test_index(self, site_dir):
        handler = SiteHandler(SiteConfig(static_dir=str(site_dir)))
        assert handler.resolve("") == site_dir.resolve() / "index.html"

    def test_nested_directory(self, site_dir):
        handler = SiteHandler(SiteConfig(static_dir=str(site_dir)))
        assert handler.resolve("guide") == site_dir.resolve() / "guide" / "index.html"

    def test_pretty_url(self, site_dir):
        handler = SiteHandler(SiteConfig(static_dir=str(site_dir)))
        assert handler.resolve("about") == site_dir.resolve() / "about.html"

    def test_traversal_blocked(self, site_dir):
        handler = SiteHandler(SiteConfig(static_dir=str(site_dir)))
        assert handler.resolve("../../secret.txt") is None

    def test_missing(self, site_dir):
        handler = SiteHandler(SiteConfig(static_dir=str(site_dir)))
        assert handler.resolve("missing.css") is None

    def test_missing_root(self, tmp_path):
        handler = SiteHandler(SiteConfig(static_dir=str(tmp_path / "not-built")))
        assert handler.resolve("") is None

    def test_nul_byte(self, site_dir):
        handler = SiteHandler(SiteConfig(static_dir=str(site_dir)))
        assert handler.resolve("index\x00.html") is None
