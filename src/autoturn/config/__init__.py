from autoturn.config.settings import Settings, settings

__all__ = ["Settings", "settings"]
