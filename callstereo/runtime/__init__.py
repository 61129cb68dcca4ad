from .phase_contract import (
    PHASE_DURATION_PROBE,
    PHASE_MERGE_COMPILE,
    PHASE_MERGE_EXECUTE,
    PHASE_RUN_TOTAL,
    phase_label,
)
from .phase_timing import (
    format_duration,
    log_phase_completed,
    log_phase_failed,
    log_phase_started,
)
