# bol_export/config.py
from __future__ import annotations
import os
from pathlib import Path
from dataclasses import dataclass, field
import yaml

from bol_export.errors import ConfigError


DEFAULT_BASE_URL = "https://www.bol.com"
DEFAULT_FILENAME = "bol_orders.csv"


def config_dir() -> Path:
    base = os.getenv("BOL_EXPORT_HOME") or os.getcwd()
    return Path(base) / "configs"


def config_path() -> Path:
    return config_dir() / "settings.yaml"


# ---------- modelos usados por load_settings() ----------


@dataclass
class ApiCfg:
    base_url: str = DEFAULT_BASE_URL
    cookie: str = ""
    csrf_token: str = ""
    user_agent: str = "Mozilla/5.0 (X11; Linux x86_64) bol-export"
    timeout: float = 20.0
    # 0 = sin reintentos
    retries: int = 0
    backoff: float = 0.5


@dataclass
class ExportCfg:
    delay_s: float = 1.0
    out_dir: Path = Path("./exports")
    filename: str = DEFAULT_FILENAME
    max_pages: int = 0


@dataclass
class LoggingCfg:
    level: str = "INFO"
    file: Path | None = None


@dataclass
class Settings:
    api: ApiCfg = field(default_factory=ApiCfg)
    export: ExportCfg = field(default_factory=ExportCfg)
    logging: LoggingCfg = field(default_factory=LoggingCfg)


# ---------- loader principal ----------


def _read_yaml(path: Path) -> dict:
    if not path.exists():
        return {}
    txt = path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(txt)
    except yaml.YAMLError as e:
        raise ConfigError(f"YAML inválido en {path}: {e}") from e
    if data is not None and not isinstance(data, dict):
        raise ConfigError(f"{path} debe contener un mapeo YAML en la raíz")
    return data or {}


def _num(kind, value, key: str):
    try:
        return kind(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Valor inválido para {key}: {value!r}") from e


def load_settings(path: str | Path | None = None) -> Settings:
    p = Path(path) if path is not None else config_path()
    data = _read_yaml(p)

    # --- API ---
    api_d = data.get("api", {}) or {}
    api = ApiCfg(
        base_url=os.getenv("BOL_BASE_URL", api_d.get("base_url", DEFAULT_BASE_URL)),
        cookie=os.getenv("BOL_COOKIE", api_d.get("cookie", "")) or "",
        csrf_token=os.getenv("BOL_CSRF_TOKEN", api_d.get("csrf_token", "")) or "",
        user_agent=api_d.get("user_agent", ApiCfg.user_agent),
        timeout=_num(float, os.getenv("BOL_TIMEOUT", api_d.get("timeout", 20)), "api.timeout"),
        retries=_num(int, api_d.get("retries", 0), "api.retries"),
        backoff=_num(float, api_d.get("backoff", 0.5), "api.backoff"),
    )

    # --- EXPORT ---
    export_d = data.get("export", {}) or {}
    export = ExportCfg(
        delay_s=_num(float, os.getenv("BOL_DELAY_S", export_d.get("delay_s", 1.0)), "export.delay_s"),
        out_dir=Path(os.getenv("BOL_OUT_DIR", export_d.get("out_dir", "./exports"))),
        filename=str(export_d.get("filename", DEFAULT_FILENAME)),
        max_pages=_num(int, export_d.get("max_pages", 0), "export.max_pages"),
    )

    # --- LOGGING ---
    logging_d = data.get("logging", {}) or {}
    log_file = logging_d.get("file")
    logging_cfg = LoggingCfg(
        level=str(logging_d.get("level", "INFO")).upper(),
        file=Path(log_file) if log_file else None,
    )

    return Settings(api=api, export=export, logging=logging_cfg)
