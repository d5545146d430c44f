"""
Utilities package
Logging setup and small string/path helpers shared across LyricSync
"""

from .logger import (
    get_logger,
    configure_from_settings,
    setup_logging,
    OperationLogger,
    create_operation_logger,
    get_current_log_file
)
from .helpers import (
    sanitize_filename,
    ensure_directory,
    format_duration,
    parse_duration_string,
    create_search_keyword,
    truncate_string
)

__all__ = [
    # Logger exports
    'get_logger',
    'configure_from_settings',
    'setup_logging',
    'OperationLogger',
    'create_operation_logger',
    'get_current_log_file',

    # Helper exports
    'sanitize_filename',
    'ensure_directory',
    'format_duration',
    'parse_duration_string',
    'create_search_keyword',
    'truncate_string',
]
