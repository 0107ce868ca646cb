from .credentials import Credentials as Credentials
from .node import Node as Node
from .node_state import NodeState as NodeState
from .node_state import Observed as Observed
from .node_state import RequestFailed as RequestFailed
from .node_state import StateVector as StateVector
from .node_state import UNKNOWN as UNKNOWN
from .node_state import Unknown as Unknown
from .node_state import UP as UP
from .snapshot import RegistrySnapshot as RegistrySnapshot
