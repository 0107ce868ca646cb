from .cascade import CascadeResult as CascadeResult
from .cascade import CrossRegionCascade as CrossRegionCascade
from .cascade import RegionResult as RegionResult
from .cascade import RegionTarget as RegionTarget
from .replica_status import RegionReadiness as RegionReadiness
from .replica_status import ReplicaStatus as ReplicaStatus
from .replica_status import ReplicaStatusSource as ReplicaStatusSource
