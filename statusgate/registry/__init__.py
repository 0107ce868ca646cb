from .node_registry import NodeRegistry as NodeRegistry
from .reverse_resolver import ReverseLookupError as ReverseLookupError
from .reverse_resolver import ReverseResolver as ReverseResolver
