from .loader import CONFIG_FILENAME, DEFAULT_CONFIG_TEMPLATE, load_config
from .models import MarkupConfig, ServerConfig, SiteConfig

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_CONFIG_TEMPLATE",
    "MarkupConfig",
    "ServerConfig",
    "SiteConfig",
    "load_config",
]
