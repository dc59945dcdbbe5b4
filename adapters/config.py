from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional
from urllib.parse import quote, urlencode

from utils.env_loader import env_int, env_str, load_environments

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORTS = {"mysql": 3306, "postgres": 5432, "postgresql": 5432}


@dataclass(frozen=True)
class DatabaseSettings:
    engine: str = "mysql"
    host: str = DEFAULT_HOST
    port: Optional[int] = None
    database: Optional[str] = None
    user: Optional[str] = None
    password: Optional[str] = None
    sqlite_path: Optional[str] = None
    options: Dict[str, str] = field(default_factory=dict)
    url: Optional[str] = None

    @classmethod
    def from_env(cls, env_path: str = ".env") -> "DatabaseSettings":
        load_environments(env_path)
        url = env_str("DATABASE_URL")
        if url:
            return cls(url=url)
        engine = (env_str("DB_ENGINE", "mysql") or "mysql").lower()
        return cls(
            engine=engine,
            host=env_str("DB_HOST", DEFAULT_HOST),
            port=env_int("DB_PORT", DEFAULT_PORTS.get(engine)),
            database=env_str("DB_NAME"),
            user=env_str("DB_USER"),
            password=env_str("DB_PASSWORD"),
            sqlite_path=env_str("SQLITE_DB_PATH"),
        )

    def connection_string(self) -> str:
        if self.url:
            return self.url
        engine = self.engine.strip().lower()
        if engine == "sqlite":
            if not self.sqlite_path:
                raise ValueError("SQLITE_DB_PATH is required for sqlite")
            return f"sqlite://{self.sqlite_path}"
        if engine not in DEFAULT_PORTS:
            raise ValueError(f"Unsupported db_engine: {engine}")
        if not self.database:
            raise ValueError("DB_NAME is required")
        if not self.user:
            raise ValueError("DB_USER is required")

        credentials = quote(self.user, safe="")
        if self.password:
            credentials += ":" + quote(self.password, safe="")
        port = self.port or DEFAULT_PORTS[engine]
        dsn = f"{engine}://{credentials}@{self.host or DEFAULT_HOST}:{port}/{quote(self.database, safe='')}"
        if self.options:
            dsn += "?" + urlencode(sorted(self.options.items()))
        return dsn


def build_connection_string(
    engine: str,
    user: str,
    password: Optional[str],
    database: str,
    host: Optional[str] = None,
    port: Optional[int] = None,
    **options: str,
) -> str:
    """Render a connection string, defaulting to the local server on the engine's standard port."""
    settings = DatabaseSettings(
        engine=engine,
        host=host or DEFAULT_HOST,
        port=port,
        database=database,
        user=user,
        password=password,
        options=dict(options),
    )
    return settings.connection_string()
