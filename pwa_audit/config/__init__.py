from .file_config import DEFAULT_OUTPUT_DIR, EnvOverrides, load_config

__all__ = [
    "DEFAULT_OUTPUT_DIR",
    "EnvOverrides",
    "load_config",
]
