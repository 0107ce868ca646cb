from .errors import OrchestratorCallError as OrchestratorCallError
from .errors import ProtocolTransportError as ProtocolTransportError
from .errors import RegionArgumentError as RegionArgumentError
from .errors import StatusgateError as StatusgateError
from .errors import TargetNotFoundError as TargetNotFoundError
