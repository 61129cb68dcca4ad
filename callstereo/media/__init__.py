from .probe import probe_duration_seconds, resolve_durations
from .executor import FfmpegMergeExecutor, build_output_stream
