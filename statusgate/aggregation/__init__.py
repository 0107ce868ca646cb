from .readiness import ReadinessEvaluator as ReadinessEvaluator
from .readiness import count_up as count_up
from .readiness import is_ready_vector as is_ready_vector
from .readiness import render_states as render_states
from .readiness import scope_to_region as scope_to_region
from .reaper import StaleNodeReaper as StaleNodeReaper
from .state_matrix import CycleResult as CycleResult
from .state_matrix import StateMatrixBuilder as StateMatrixBuilder
from .summary import StatusSummary as StatusSummary
from .summary import status_counts as status_counts
