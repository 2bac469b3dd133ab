"""設定模組。"""

from .manager import ConfigManager
from .schema import ConfigurationError, validate_config
from .settings import ExportSettings, ScpSettings

__all__ = [
    "ConfigManager",
    "ConfigurationError",
    "ExportSettings",
    "ScpSettings",
    "validate_config",
]
