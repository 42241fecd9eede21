from .logger import (
    clear_thread_id,
    get_logger,
    get_thread_id,
    log_stage,
    set_thread_id,
    setup_logging,
)

__all__ = [
    "clear_thread_id",
    "get_logger",
    "get_thread_id",
    "log_stage",
    "set_thread_id",
    "setup_logging",
]
