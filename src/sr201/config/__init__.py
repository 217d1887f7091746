from .config import (
    config,
    ConfigStore,
    setup_logging,
    is_development_mode
)
