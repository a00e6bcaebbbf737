from typing import Any, Dict, Optional
from pathlib import Path
from pydantic import BaseModel, ConfigDict
from dotenv import load_dotenv
import os
import yaml


ENV_NAMES = ("development", "production")
DEFAULT_DISCRIMINATOR_KEY = "__t"

settings: Optional["CompilerSettings"] = None


class CompilerSettings(BaseModel):
    """Opciones globales del compilador."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Rechaza enums numéricos en lugar de guardar sus valores posicionales
    strict_enum: bool = False
    discriminator_key: str = DEFAULT_DISCRIMINATOR_KEY
    log_level: str = "INFO"


def _env_flag(name: str) -> Optional[bool]:
    value = os.getenv(name)
    if value is None:
        return None
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_config(path: Optional[str | Path] = None, env_file: Optional[str | Path] = None) -> CompilerSettings:
    """
    Carga la configuración desde YAML.

    El fichero puede tener claves de primer nivel y secciones
    development/production; la sección activa se elige con DOCSCHEMA_ENV
    y se mezcla sobre las claves de primer nivel.
    """
    global settings

    load_dotenv(env_file)
    if path is None:
        path = os.getenv("DOCSCHEMA_CONFIG")

    data: Dict[str, Any] = {}
    if path is not None:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    active_env_name = os.getenv("DOCSCHEMA_ENV", "production")
    env_data = data.get(active_env_name) or {}

    filtered_data = {k: v for k, v in data.items() if k not in ENV_NAMES}
    filtered_data.update(env_data)

    strict_enum = _env_flag("DOCSCHEMA_STRICT_ENUM")
    if strict_enum is not None:
        filtered_data["strict_enum"] = strict_enum

    settings = CompilerSettings(**filtered_data)
    return settings


def get_settings() -> CompilerSettings:
    global settings
    if settings is None:
        settings = CompilerSettings()
    return settings


def set_global_options(**changes: Any) -> CompilerSettings:
    """Cambia la configuración global; solo afecta a compilaciones posteriores."""
    global settings
    settings = CompilerSettings(**{**get_settings().model_dump(), **changes})
    return settings


def reset_settings() -> None:
    global settings
    settings = None
