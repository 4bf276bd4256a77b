import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "model": "anthropic",
    "github_client_id": None,  # None = OAuth sign-in unavailable, PAT sign-in still works
    "auth_backend_url": "http://localhost:8080/v1/auth/github",
    "redirect_uri": "http://localhost:3000",
    "github_api_url": "https://api.github.com",
    "github_authorize_url": "https://github.com/login/oauth/authorize",
    "oauth_scope": "repo read:user",
    "store": "sqlite",
    "store_path": "~/.prbob/profile.db",
}


def load_config(config_path: str = ".prbob.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prbob.yml in the current directory
      3. CLI argument overrides
      4. Environment variables for credentials and deployment endpoints
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # The OAuth app id and backend are deployment settings, so the environment wins.
    if os.environ.get("GITHUB_CLIENT_ID"):
        config["github_client_id"] = os.environ["GITHUB_CLIENT_ID"]
    if os.environ.get("PRBOB_AUTH_BACKEND_URL"):
        config["auth_backend_url"] = os.environ["PRBOB_AUTH_BACKEND_URL"]
    if os.environ.get("PRBOB_STORE_PATH"):
        config["store_path"] = os.environ["PRBOB_STORE_PATH"]

    config["anthropic_api_key"] = os.environ.get("ANTHROPIC_API_KEY")
    config["openai_api_key"] = os.environ.get("OPENAI_API_KEY")

    return config
