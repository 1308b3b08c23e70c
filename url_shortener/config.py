"""Configuration management for URL shortener."""

import argparse
import os
from typing import Optional, Sequence, Tuple
from urllib.parse import urlparse

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings

# Config field -> environment variable overriding its command-line flag
FLAG_FIELDS = {
    "server_address": "SERVER_ADDRESS",
    "base_url": "BASE_URL",
    "file_storage_path": "FILE_STORAGE_PATH",
    "database_dsn": "DATABASE_DSN",
}


def parse_server_address(value: str) -> Tuple[str, int]:
    """Split 'host:port' into its parts.

    Raises:
        ValueError: If the address is not host:port with a valid port
    """
    parts = value.split(":")
    if len(parts) != 2:
        raise ValueError(f"invalid address {value!r}: must be in form host:port")

    host, port_str = parts[0].strip(), parts[1].strip()
    if not host:
        raise ValueError(f"invalid address {value!r}: host cannot be empty")
    if any(c.isspace() for c in host):
        raise ValueError(f"invalid host {host!r}: host must not contain whitespace")

    try:
        port = int(port_str)
    except ValueError:
        raise ValueError(f"invalid port {port_str!r}") from None
    if not 0 < port <= 65535:
        raise ValueError(f"port out of range: {port} (must be 1-65535)")

    return host, port


class Config(BaseSettings):
    """Application configuration."""

    # Server settings
    server_address: str = Field(
        default="localhost:8080",
        description="Address to bind to, host:port"
    )

    base_url: str = Field(
        default="http://localhost:8080/",
        description="Base URL for generated short links; must match server_address"
    )

    # Storage settings
    file_storage_path: str = Field(
        default="data.json",
        description="JSON snapshot file for the in-memory repository (empty disables)"
    )

    database_dsn: Optional[str] = Field(
        default=None,
        description="PostgreSQL DSN; selects the SQL repository when set"
    )

    db_timeout_seconds: float = Field(
        default=2.0,
        gt=0,
        description="Timeout for every database call"
    )

    db_pool_max_size: int = Field(
        default=10,
        ge=1,
        description="Maximum database connection pool size"
    )

    # Redis settings (optional)
    redis_url: Optional[str] = Field(
        default=None,
        description="Redis connection URL for the redirect cache"
    )

    cache_ttl_seconds: int = Field(
        default=3600,
        ge=1,
        description="Cache TTL in seconds"
    )

    # URL shortener settings
    short_code_length: int = Field(
        default=6,
        ge=1,
        le=32,
        description="Length of generated short codes"
    )

    max_collision_retries: int = Field(
        default=6,
        ge=1,
        description="Attempts at generating a free short code"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    log_format: str = Field(
        default="text",
        description="Log format: text or json"
    )

    log_file: Optional[str] = Field(
        default=None,
        description="Log file path (logs to stdout if not specified)"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",  # Ignore extra environment variables
    }

    @field_validator("server_address")
    @classmethod
    def validate_server_address(cls, v: str) -> str:
        parse_server_address(v)
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("text", "json"):
            raise ValueError(f"unknown log format: {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {v}")
        return v

    @model_validator(mode="after")
    def validate_base_url_matches_server(self) -> "Config":
        """Base URL must point at the same host and port the server binds."""
        parsed = urlparse(self.base_url)
        if not parsed.scheme or not parsed.hostname:
            raise ValueError(
                f"invalid base_url {self.base_url!r}: must include scheme and host, "
                "e.g. http://localhost:8080/"
            )

        host, port = parse_server_address(self.server_address)
        try:
            url_port = parsed.port
        except ValueError:
            raise ValueError(f"invalid base_url {self.base_url!r}: bad port") from None

        if url_port is None:
            raise ValueError(
                f"invalid base_url {self.base_url!r}: port must be specified explicitly, "
                f"e.g. http://{host}:{port}/"
            )

        if parsed.hostname != host or url_port != port:
            raise ValueError(
                f"base_url {self.base_url!r} does not match server address {host}:{port}; "
                "they must point to the same host and port"
            )
        return self

    @property
    def host(self) -> str:
        return parse_server_address(self.server_address)[0]

    @property
    def port(self) -> int:
        return parse_server_address(self.server_address)[1]

    def summary(self) -> dict:
        """Configuration for logging, with credentials masked."""
        data = self.model_dump()
        for key in ("database_dsn", "redis_url"):
            if data.get(key):
                parsed = urlparse(data[key])
                if parsed.password:
                    data[key] = data[key].replace(f":{parsed.password}@", ":***@")
        return data


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="URL shortener service")
    parser.add_argument("-a", dest="server_address", help='Server address in form "host:port"')
    parser.add_argument("-b", dest="base_url", help='Base URL, e.g. "http://localhost:8080/"')
    parser.add_argument("-f", dest="file_storage_path", help="File storage path")
    parser.add_argument("-d", dest="database_dsn", help="PostgreSQL DSN")
    return parser


def load_config(argv: Optional[Sequence[str]] = None) -> Config:
    """Load configuration from flags and environment.

    Environment variables take precedence over command-line flags, which take
    precedence over defaults.

    Args:
        argv: Command-line arguments (defaults to none)
    """
    args = build_arg_parser().parse_args(list(argv) if argv is not None else [])

    overrides = {}
    for field, env_name in FLAG_FIELDS.items():
        value = getattr(args, field)
        if value is not None and env_name not in os.environ:
            overrides[field] = value

    return Config(**overrides)
