from utils.logger import logger_manager, log_function

# Single import point for modules: logger_manager.setup_logger(__name__) + @log_function
__all__ = ["logger_manager", "log_function"]
