"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from typing import Optional, Protocol

# bcrypt rejects (or silently truncates) input beyond this many bytes
BCRYPT_MAX_PASSWORD_BYTES = 72


@dataclass
class RedisConfig:
    """Credential store configuration."""
    backend: str
    host: str
    port: int
    db: int
    password: Optional[str]
    users_table: str
    sessions_table: str

    @property
    def url(self) -> str:
        """Redis URL without the password (passed separately)."""
        return f"redis://{self.host}:{self.port}/{self.db}"


@dataclass
class APIConfig:
    """API configuration."""
    port: int
    host: str
    debug: bool
    environment: str
    log_level: str

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@dataclass
class AuthConfig:
    """Authentication configuration."""
    salt_rounds: int
    username_max_length: int
    password_min_length: int
    password_max_length: int
    unify_credential_errors: bool
    secure_cookies: bool


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_redis_config(self) -> RedisConfig:
        """Get credential store configuration."""
        ...

    def get_api_config(self) -> APIConfig:
        """Get API configuration."""
        ...

    def get_auth_config(self) -> AuthConfig:
        """Get authentication configuration."""
        ...


def _env_int(name: str, default: str) -> int:
    value = os.getenv(name, default)
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_redis_config(self) -> RedisConfig:
        """Get credential store configuration from environment variables."""
        backend = os.getenv("STORE_BACKEND", "redis").lower()
        if backend not in ("redis", "memory"):
            raise ValueError(f"STORE_BACKEND must be 'redis' or 'memory', got {backend!r}")

        # Port might be in tcp://host:port format from K8s service links
        redis_port_env = os.getenv("REDIS_PORT", "6379")
        if redis_port_env.startswith("tcp://"):
            redis_port_env = redis_port_env.split(":")[-1]
        try:
            redis_port = int(redis_port_env)
        except ValueError:
            raise ValueError(f"REDIS_PORT must be an integer, got {redis_port_env!r}") from None

        return RedisConfig(
            backend=backend,
            host=os.getenv("REDIS_HOST", "localhost"),
            port=redis_port,
            db=_env_int("REDIS_DB", "0"),
            password=os.getenv("REDIS_PASSWORD"),  # Optional: for authenticated Redis
            users_table=os.getenv("USERS_TABLE", "users"),
            sessions_table=os.getenv("SESSIONS_TABLE", "sessions"),
        )

    def get_api_config(self) -> APIConfig:
        """Get API configuration from environment variables."""
        return APIConfig(
            port=_env_int("API_PORT", "8080"),
            host=os.getenv("API_HOST", "0.0.0.0"),
            debug=_env_bool("API_DEBUG"),
            environment=os.getenv("ENVIRONMENT", "development"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def get_auth_config(self) -> AuthConfig:
        """Get authentication configuration from environment variables."""
        password_min_length = _env_int("PASSWORD_MIN_LENGTH", "8")
        password_max_length = _env_int("PASSWORD_MAX_LENGTH", "72")
        if password_max_length > BCRYPT_MAX_PASSWORD_BYTES:
            raise ValueError(
                f"PASSWORD_MAX_LENGTH must be at most {BCRYPT_MAX_PASSWORD_BYTES}, "
                f"got {password_max_length}"
            )
        if password_min_length > password_max_length:
            raise ValueError(
                f"PASSWORD_MIN_LENGTH must not exceed PASSWORD_MAX_LENGTH, "
                f"got {password_min_length} > {password_max_length}"
            )

        return AuthConfig(
            salt_rounds=_env_int("SALT_ROUNDS", "10"),
            username_max_length=_env_int("USERNAME_MAX_LENGTH", "100"),
            password_min_length=password_min_length,
            password_max_length=password_max_length,
            unify_credential_errors=_env_bool("UNIFY_CREDENTIAL_ERRORS"),
            # Secure flag only in production
            secure_cookies=self.get_api_config().is_production,
        )
