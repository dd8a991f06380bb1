from .settings import config, settings

__all__ = ["config", "settings"]
