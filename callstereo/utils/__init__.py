from .logger import configure_logging, get_logger
from .common_utils import display_elapsed_time
