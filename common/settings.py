import os
from typing import Optional

from pydantic import BaseModel, field_validator, ValidationError


def _is_placeholder(v: Optional[str]) -> bool:
    return isinstance(v, str) and "${" in v


class RPC(BaseModel):
    url: str
    timeout: float = 30

    @field_validator("url")
    @classmethod
    def must_be_http(cls, v: str) -> str:
        # allow placeholder during tests by swapping in a safe default
        if _is_placeholder(v):
            return "https://example.invalid"
        if not v.startswith(("https://", "http://")):
            raise ValueError("RPC URL must be http(s)")
        return v


class DB(BaseModel):
    driver: str = "sqlite"
    sqlite_path: str = "data/indexer.db"
    dsn: Optional[str] = None

    @field_validator("driver")
    @classmethod
    def known_driver(cls, v: str) -> str:
        v = v.lower()
        if v not in ("sqlite", "postgres", "postgresql", "pg"):
            raise ValueError(f"unknown db driver {v!r}")
        return v

    @field_validator("dsn")
    @classmethod
    def drop_placeholder(cls, v: Optional[str]) -> Optional[str]:
        return None if _is_placeholder(v) else v

    def storage_options(self) -> dict:
        return {"sqlite_path": self.sqlite_path, "dsn": self.dsn}


class Ingestion(BaseModel):
    start_height: int = 1
    chunk_size: int = 100
    per_page: Optional[int] = None

    @field_validator("start_height", "chunk_size")
    @classmethod
    def positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be >= 1")
        return v


class Logging(BaseModel):
    level: str = "INFO"


class Settings(BaseModel):
    network: str = "pocket"
    rpc: RPC
    db: DB = DB()
    ingestion: Ingestion = Ingestion()
    logging: Logging = Logging()


def load_settings(path: str = "config.yaml") -> Settings:
    import yaml
    try:
        with open(path, "r") as f:
            cfg = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise RuntimeError(f"Cannot read configuration {path}: {e}") from e

    # allow secure override via env at runtime
    env_rpc = os.environ.get("RPC_URL_OVERRIDE")
    if env_rpc:
        cfg.setdefault("rpc", {})["url"] = env_rpc
    env_dsn = os.environ.get("DB_DSN_OVERRIDE")
    if env_dsn:
        cfg.setdefault("db", {})["dsn"] = env_dsn

    try:
        return Settings.model_validate(cfg)
    except ValidationError as e:
        raise RuntimeError(f"Configuration error in {path}: {e}") from e
