from .kubernetes_gateway import KubernetesGateway as KubernetesGateway
from .kubernetes_gateway import load_client_config as load_client_config
from .models import PodContainers as PodContainers
from .seeds import SeedDiscovery as SeedDiscovery
