from packages.mm_core.logging.config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
