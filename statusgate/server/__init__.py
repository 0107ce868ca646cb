from .maintenance_server import MaintenanceServer as MaintenanceServer
from .probe_server import ProbeServer as ProbeServer
