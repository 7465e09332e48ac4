from agribot.config.env import get_settings, load_env
from agribot.config.settings import Settings

__all__ = ["Settings", "get_settings", "load_env"]
