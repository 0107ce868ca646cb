from .maintenance_service import MaintenanceService as MaintenanceService
from .maintenance_service import ordinal_sort_key as ordinal_sort_key
