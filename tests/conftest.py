"""Shared fixtures."""

import pytest

from sitehook.config import DeployConfig, Settings, SiteConfig, WebhookConfig


@pytest.fixture
def webhook_secret():
    return "gh-secret"


@pytest.fixture
def site_dir(tmp_path):
    root = tmp_path / "dist" / "client"
    (root / "guide").mkdir(parents=True)
    (root / "index.html").write_text("<h1>Docs</h1>")
    (root / "guide" / "index.html").write_text("<h1>Guide</h1>")
    (root / "about.html").write_text("<h1>About</h1>")
    (root / "style.css").write_text("body {}")
    (tmp_path / "secret.txt").write_text("outside the site")
    return root


@pytest.fixture
def make_settings(tmp_path, site_dir, webhook_secret):
    def _make(secret: str | None = None, commands: list[str] | None = None, timeout: float = 30.0) -> Settings:
        return Settings(
            webhook=WebhookConfig(secret=webhook_secret if secret is None else secret),
            deploy=DeployConfig(
                working_dir=str(tmp_path),
                commands=commands if commands is not None else ["echo built"],
                timeout=timeout,
                log_file=str(tmp_path / "logs" / "deploy.log"),
            ),
            site=SiteConfig(static_dir=str(site_dir)),
        )

    return _make
