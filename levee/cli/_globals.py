"""Process-wide CLI configuration, set once by the root callback."""

from typing import Optional

from levee.core.config import LeveeConfig, get_config

_config: Optional[LeveeConfig] = None


def set_global_config(config: LeveeConfig) -> None:
    global _config
    _config = config


def get_global_config() -> LeveeConfig:
    if _config is None:
        return get_config()
    return _config
