"""GatewayConfig 环境变量加载测试"""

import pytest
from taskboard.gateway.config import AUTH_COOKIE_MAX_AGE_S, load_gateway_config

ENV_KEYS = (
    "TASKS_PASSCODE",
    "TARS_WORKER_TOKEN",
    "TASK_WEBHOOK_SECRET",
    "TASKBOARD_DEFAULT_AUTHOR",
    "TASKBOARD_COOKIE_SECURE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestLoadGatewayConfig:
    def test_defaults(self):
        config = load_gateway_config()
        assert config.passcode.get_secret_value() == ""
        assert config.worker_token.get_secret_value() == ""
        assert config.webhook_secret.get_secret_value() == ""
        assert config.default_author == "Owner"
        assert config.webhook_author == "System"
        assert config.cookie_secure is True
        assert config.cookie_max_age_s == AUTH_COOKIE_MAX_AGE_S == 43200

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("TASKS_PASSCODE", "pw")
        monkeypatch.setenv("TARS_WORKER_TOKEN", "tok")
        monkeypatch.setenv("TASK_WEBHOOK_SECRET", "sec")
        monkeypatch.setenv("TASKBOARD_DEFAULT_AUTHOR", "Lead")
        monkeypatch.setenv("TASKBOARD_COOKIE_SECURE", "false")

        config = load_gateway_config()
        assert config.passcode.get_secret_value() == "pw"
        assert config.worker_token.get_secret_value() == "tok"
        assert config.webhook_secret.get_secret_value() == "sec"
        assert config.default_author == "Lead"
        assert config.cookie_secure is False

    def test_secrets_hidden_in_repr(self, monkeypatch):
        monkeypatch.setenv("TASKS_PASSCODE", "super-secret")
        assert "super-secret" not in repr(load_gateway_config())

    def test_invalid_cookie_secure_keeps_default(self, monkeypatch):
        monkeypatch.setenv("TASKBOARD_COOKIE_SECURE", "maybe")
        assert load_gateway_config().cookie_secure is True
