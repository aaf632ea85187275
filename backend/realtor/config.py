from __future__ import annotations

import os


def _load_dotenv_if_present() -> None:
    """
    Load environment variables from a local `.env` file (dev convenience).

    Production deployments should set real environment variables instead.
    """
    try:
        from dotenv import load_dotenv  # type: ignore
    except ImportError:
        return
    # Do not override existing environment variables.
    load_dotenv(override=False)


# Load .env as early as possible (dev only).
_load_dotenv_if_present()


def _int_env(name: str, default: int, *, lo: int, hi: int) -> int:
    raw = (os.environ.get(name) or "").strip()
    try:
        v = int(raw or str(default))
    except ValueError:
        v = default
    return max(lo, min(hi, v))


def database_url() -> str:
    # Fallback for local dev:
    url = os.environ.get("DATABASE_URL") or "sqlite:///./local.db"
    # Some managed providers still supply `postgres://...` which SQLAlchemy treats as invalid.
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


def jwt_secret() -> str:
    """
    Signing secret for access tokens.

    There is deliberately no fallback: an empty value makes token issuance and
    verification fail with a configuration error.
    """
    return (os.environ.get("JWT_SECRET") or "").strip()


def access_token_minutes() -> int:
    return _int_env("ACCESS_TOKEN_MINUTES", 60, lo=1, hi=24 * 60)


def reset_token_minutes() -> int:
    """
    Password reset token lifetime in minutes (env `RESET_TOKEN_MINUTES`).
    """
    return _int_env("RESET_TOKEN_MINUTES", 10, lo=1, hi=60)


def bcrypt_rounds() -> int:
    return _int_env("BCRYPT_ROUNDS", 12, lo=4, hi=15)


def is_local_dev() -> bool:
    """
    Heuristic for local/dev runs.

    We treat the app as "local dev" when DATABASE_URL is not set, because
    `database_url()` falls back to sqlite in that case.
    """
    return not (os.environ.get("DATABASE_URL") or "").strip()


def app_env() -> str:
    """
    Application environment marker:
    - local (default when running with sqlite fallback)
    - staging
    - prod
    """
    raw = (os.environ.get("APP_ENV") or "").strip().lower()
    if raw:
        return raw
    return "local" if is_local_dev() else "prod"


def allowed_hosts() -> list[str]:
    """
    Comma-separated list for TrustedHost middleware.
    Example: ALLOWED_HOSTS=api.example.com,example.com
    """
    raw = (os.environ.get("ALLOWED_HOSTS") or "").strip()
    if not raw:
        return ["*"]
    hosts = [h.strip() for h in raw.split(",") if h.strip()]
    return hosts or ["*"]


def cors_origins() -> list[str]:
    raw = (os.environ.get("CORS_ORIGINS") or "").strip()
    if raw:
        return [o.strip() for o in raw.split(",") if o.strip()]
    # Reasonable local defaults (dev).
    return [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:9002",
        "http://127.0.0.1:9002",
    ]


def frontend_base_url() -> str:
    """
    Public site origin used to build password reset links.
    """
    return (os.environ.get("FRONTEND_BASE_URL") or "http://localhost:3000").strip().rstrip("/")


def primary_admin_email() -> str:
    """
    Email of the protected primary administrator.

    A signup with this address is created as an admin and flagged `is_protected`.
    """
    return (os.environ.get("PRIMARY_ADMIN_EMAIL") or "").strip().lower()


def primary_admin_password() -> str:
    return os.environ.get("PRIMARY_ADMIN_PASSWORD") or ""


def enforce_secure_secrets() -> None:
    """
    Fail-fast in production if the signing secret is missing or weak.
    """
    if app_env() in {"prod", "production"}:
        if len(jwt_secret()) < 32:
            raise RuntimeError("JWT_SECRET must be set to at least 32 characters in production")
