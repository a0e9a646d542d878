from __future__ import annotations

import os
from dataclasses import dataclass

import requests

DEFAULT_POSTAL_CODE = "L3K 1V8"
DEFAULT_FETCH_TIMEOUT_S = 20.0
DEFAULT_FETCH_WORKERS = 8

REQUIRED_KEYS = [
    "SCRAPINGBEE_API_KEY",
]

OPTIONAL_KEYS = [
    "DEFAULT_POSTAL_CODE",
    "PRICE_FETCH_TIMEOUT",
    "PRICE_FETCH_WORKERS",
]

# Infisical connection (read from env vars set in compose)
INFISICAL_URL = os.environ.get("INFISICAL_URL", "http://localhost:8089")
INFISICAL_CLIENT_ID = os.environ.get("INFISICAL_CLIENT_ID", "")
INFISICAL_CLIENT_SECRET = os.environ.get("INFISICAL_CLIENT_SECRET", "")
INFISICAL_PROJECT_ID = os.environ.get("INFISICAL_PROJECT_ID", "")


@dataclass(frozen=True)
class Config:
    scrapingbee_api_key: str | None = None
    postal_code: str = DEFAULT_POSTAL_CODE
    fetch_timeout_s: float = DEFAULT_FETCH_TIMEOUT_S
    max_workers: int = DEFAULT_FETCH_WORKERS

    @property
    def live_quotes(self) -> bool:
        return bool(self.scrapingbee_api_key)

    @staticmethod
    def from_mapping(values: dict[str, str]) -> "Config":
        key = (values.get("SCRAPINGBEE_API_KEY") or "").strip()
        return Config(
            scrapingbee_api_key=key or None,
            postal_code=(values.get("DEFAULT_POSTAL_CODE") or DEFAULT_POSTAL_CODE).strip(),
            fetch_timeout_s=_number(values, "PRICE_FETCH_TIMEOUT", DEFAULT_FETCH_TIMEOUT_S, float),
            max_workers=_number(values, "PRICE_FETCH_WORKERS", DEFAULT_FETCH_WORKERS, int),
        )

    @staticmethod
    def from_env(environ: dict[str, str] | None = None) -> "Config":
        return Config.from_mapping(dict(os.environ if environ is None else environ))

    @staticmethod
    def load_from_infisical(*, env: str = "dev") -> "Config":
        token = _infisical_login()
        secrets = _infisical_list_secrets(token, env=env)

        for k in REQUIRED_KEYS:
            if k not in secrets:
                raise RuntimeError(f"Missing Infisical secret: {k}")
            val = secrets[k]
            if not val or val.strip() in {"PLACEHOLDER", "MASKED", ""}:
                raise RuntimeError(f"Infisical secret {k} is still a placeholder")

        return Config.from_mapping(secrets)


def _number(values: dict[str, str], key: str, default, cast):
    raw = values.get(key)
    if raw is None or not str(raw).strip():
        return default
    try:
        val = cast(raw)
    except ValueError:
        raise RuntimeError(f"{key} must be a number, got {raw!r}")
    if val <= 0:
        raise RuntimeError(f"{key} must be positive, got {raw!r}")
    return val


def _infisical_login() -> str:
    """Get an access token via Universal Auth."""
    resp = requests.post(
        f"{INFISICAL_URL}/api/v1/auth/universal-auth/login",
        json={"clientId": INFISICAL_CLIENT_ID, "clientSecret": INFISICAL_CLIENT_SECRET},
        timeout=15,
    )
    if resp.status_code >= 400:
        raise RuntimeError(f"Infisical login failed with status {resp.status_code}")
    return resp.json()["accessToken"]


def _infisical_list_secrets(token: str, *, env: str = "dev") -> dict[str, str]:
    """List all secrets from Infisical for the given environment."""
    resp = requests.get(
        f"{INFISICAL_URL}/api/v4/secrets",
        params={"projectId": INFISICAL_PROJECT_ID, "environment": env, "secretPath": "/"},
        headers={"Authorization": f"Bearer {token}"},
        timeout=15,
    )
    if resp.status_code >= 400:
        raise RuntimeError(f"Infisical secrets request failed with status {resp.status_code}")

    return {s["secretKey"]: s["secretValue"] for s in resp.json().get("secrets", [])}
