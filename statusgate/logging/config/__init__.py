from .logging_config import LoggingConfig as LoggingConfig
from .logging_config import LogOutput as LogOutput
