from .config import LoggingConfig as LoggingConfig
from .models import Entry as Entry
from .models import Log as Log
from .models import LogLevel as LogLevel
from .models import LogLevelName as LogLevelName
from .streams import Logger as Logger
from .streams import LoggerStream as LoggerStream
