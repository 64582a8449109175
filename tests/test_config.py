"""Tests for settings loading."""

import pytest

from sitehook.config import DeployConfig, Settings, WebhookConfig, load_settings
from sitehook.deploy.trigger import DeploymentTrigger
from sitehook.errors import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ("SITEHOOK_WEBHOOK__SECRET", "GITHUB_WEBHOOK_SECRET", "SITEHOOK_CONFIG"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SITEHOOK_CONFIG_DIR", str(tmp_path / "no-config"))


class TestDefaults:
    def test_server_and_webhook(self):
        settings = Settings()
        assert settings.server.port == 4321
        assert settings.webhook.path == "/github-webhook"
        assert settings.webhook.expected_event == "push"
        assert settings.webhook.signature_header == "X-Hub-Signature-256"
        assert settings.site.static_dir == "dist/client"

    def test_no_secret(self):
        assert WebhookConfig().secret_bytes() is None

    def test_default_deploy_sequence(self):
        commands = DeployConfig().commands
        assert commands[0] == "git pull"
        assert "npm run build" in commands
        assert commands[-1] == "pm2 reload all"
        assert DeployConfig().log_file == "deploy.log"

    def test_secret_hidden_in_repr(self):
        cfg = WebhookConfig(secret="hunter2")
        assert "hunter2" not in repr(cfg)
        assert cfg.secret_bytes() == b"hunter2"


class TestLoadSettings:
    def test_secret_from_env(self, monkeypatch):
        monkeypatch.setenv("SITEHOOK_WEBHOOK__SECRET", "from-env")
        assert load_settings().webhook.secret_bytes() == b"from-env"

    def test_github_secret_fallback(self, monkeypatch):
        monkeypatch.setenv("GITHUB_WEBHOOK_SECRET", "fallback")
        assert load_settings().webhook.secret_bytes() == b"fallback"

    def test_prefixed_secret_wins_over_fallback(self, monkeypatch):
        monkeypatch.setenv("GITHUB_WEBHOOK_SECRET", "fallback")
        monkeypatch.setenv("SITEHOOK_WEBHOOK__SECRET", "primary")
        assert load_settings().webhook.secret_bytes() == b"primary"

    def test_yaml_overlay(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "server:\n  port: 8080\n"
            "deploy:\n  commands: ['echo hi']\n  timeout: 60\n"
        )
        settings = load_settings(path)
        assert settings.server.port == 8080
        assert settings.deploy.commands == ["echo hi"]
        assert settings.deploy.timeout == 60
        assert settings.webhook.path == "/github-webhook"

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text("webhook:\n  secret: from-yaml\n")
        monkeypatch.setenv("SITEHOOK_WEBHOOK__SECRET", "from-env")
        assert load_settings(path).webhook.secret_bytes() == b"from-env"

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("server: [unclosed\n")
        with pytest.raises(ConfigError):
            load_settings(path)

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("server:\n  port: not-a-number\n")
        with pytest.raises(ConfigError):
            load_settings(path)


class TestDefaultDeploySequence:
    def test_pm2_delete_tolerates_missing_app(self):
        commands = DeployConfig().commands
        delete = next(c for c in commands if c.startswith("pm2 delete"))
        assert delete.endswith("|| true")
        assert commands.index(delete) < next(
            i for i, c in enumerate(commands) if c.startswith("pm2 start")
        )

    async def test_fresh_host_sequence_reaches_start(self, tmp_path):
        # "false" stands in for pm2 delete on a host that never ran the app
        trigger = DeploymentTrigger(
            DeployConfig(
                working_dir=str(tmp_path),
                commands=["echo build", "false || true", "echo pm2-start"],
            )
        )
        attempt = await trigger.run()
        assert attempt.succeeded
        assert "pm2-start" in attempt.stdout
