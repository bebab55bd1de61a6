"""Fixed constants shared by the engine and its collaborators."""

ML_PER_LITRE = 1000.0
ASSUMED_MOLARITY = 1.0  # mol/L for volume inputs

PROGRESS_MIN = 0.0
PROGRESS_MAX = 100.0
PROGRESS_STEP = 2.0  # percent per frame
FRAME_INTERVAL_MS = 50.0

TRACE_DECIMALS = 4
