from .network_config import Settings, get_settings
