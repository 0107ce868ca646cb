from .models import ReadRequest as ReadRequest
from .models import ReadResult as ReadResult
from .models import ReadTarget as ReadTarget
from .protocol_client import ProtocolClient as ProtocolClient
