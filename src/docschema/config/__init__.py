from .config import (
    CompilerSettings,
    DEFAULT_DISCRIMINATOR_KEY,
    load_config,
    get_settings,
    set_global_options,
    reset_settings,
)

__all__ = [
    "CompilerSettings",
    "DEFAULT_DISCRIMINATOR_KEY",
    "load_config",
    "get_settings",
    "set_global_options",
    "reset_settings",
]
