"""Tests for configuration loading."""

from prbob_core.config import load_config


def test_defaults_applied_when_no_config_file(tmp_path, monkeypatch):
    monkeypatch.delenv("GITHUB_CLIENT_ID", raising=False)
    monkeypatch.delenv("PRBOB_AUTH_BACKEND_URL", raising=False)
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["model"] == "anthropic"
    assert config["github_client_id"] is None
    assert config["auth_backend_url"] == "http://localhost:8080/v1/auth/github"
    assert config["oauth_scope"] == "repo read:user"
    assert config["store"] == "sqlite"


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / ".prbob.yml"
    cfg.write_text("model: openai\nredirect_uri: http://localhost:9000\nstore: memory\n")
    config = load_config(config_path=str(cfg))
    assert config["model"] == "openai"
    assert config["redirect_uri"] == "http://localhost:9000"
    assert config["store"] == "memory"


def test_empty_config_file_uses_defaults(tmp_path):
    cfg = tmp_path / ".prbob.yml"
    cfg.write_text("")
    config = load_config(config_path=str(cfg))
    assert config["model"] == "anthropic"


def test_cli_overrides_config_file(tmp_path):
    cfg = tmp_path / ".prbob.yml"
    cfg.write_text("model: openai\n")
    config = load_config(config_path=str(cfg), cli_overrides={"model": "anthropic"})
    assert config["model"] == "anthropic"


def test_none_cli_overrides_ignored(tmp_path):
    cfg = tmp_path / ".prbob.yml"
    cfg.write_text("model: openai\n")
    config = load_config(config_path=str(cfg), cli_overrides={"model": None})
    assert config["model"] == "openai"


def test_client_id_from_file(tmp_path, monkeypatch):
    monkeypatch.delenv("GITHUB_CLIENT_ID", raising=False)
    cfg = tmp_path / ".prbob.yml"
    cfg.write_text("github_client_id: Iv1.file\n")
    assert load_config(config_path=str(cfg))["github_client_id"] == "Iv1.file"


def test_client_id_env_wins_over_file(tmp_path, monkeypatch):
    monkeypatch.setenv("GITHUB_CLIENT_ID", "Iv1.env")
    cfg = tmp_path / ".prbob.yml"
    cfg.write_text("github_client_id: Iv1.file\n")
    assert load_config(config_path=str(cfg))["github_client_id"] == "Iv1.env"


def test_env_vars_loaded(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "ant-key")
    monkeypatch.setenv("OPENAI_API_KEY", "oai-key")
    monkeypatch.setenv("PRBOB_AUTH_BACKEND_URL", "https://auth.example.com/v1/auth/github")
    monkeypatch.setenv("PRBOB_STORE_PATH", "/tmp/prbob.db")
    config = load_config(config_path="nonexistent.yml")
    assert config["anthropic_api_key"] == "ant-key"
    assert config["openai_api_key"] == "oai-key"
    assert config["auth_backend_url"] == "https://auth.example.com/v1/auth/github"
    assert config["store_path"] == "/tmp/prbob.db"


def test_defaults_not_mutated(tmp_path):
    config_a = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    config_a["model"] = "openai"
    config_b = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config_b["model"] == "anthropic"
