# config.py
import os

# ======= Search caps =======
# 0 disables the cap.
MAX_SECONDS   = float(os.getenv("PC_MAX_SECONDS", "60"))
MAX_SOLUTIONS = int(os.getenv("PC_MAX_SOLUTIONS", "0"))
NODE_LIMIT    = int(os.getenv("PC_NODE_LIMIT", "0"))

# ======= Pre-flight =======
# Reject puzzles whose size cannot be reached by the bag, or that contain a
# cell no piece can ever cover, before starting the search.
PREFLIGHT = int(os.getenv("PC_PREFLIGHT", "1")) != 0

# ======= Isolation =======
# Run each HTTP solve in a spawned child so the timebox is enforced by
# terminating the process.
ISOLATE = int(os.getenv("PC_ISOLATE", "0")) != 0

# ======= CP-SAT cross-check =======
CP_SAT_SECONDS = float(os.getenv("PC_CP_SAT_SECONDS", "30"))
WORKERS        = int(os.getenv("PC_WORKERS", "1"))
MAX_MEMORY_MB  = int(os.getenv("PC_MAX_MEMORY_MB", "2048"))

# ======= Progress =======
PROGRESS_EVERY = int(os.getenv("PC_PROGRESS_EVERY", "5000"))  # nodes between progress writes

# ======= Output =======
SOLUTIONS_OUT = os.getenv("PC_SOLUTIONS_OUT", "solutions.txt")
MAX_RETURNED  = int(os.getenv("PC_MAX_RETURNED", "100"))       # solutions echoed by the HTTP API


class CFG:
    MAX_SECONDS   = MAX_SECONDS
    MAX_SOLUTIONS = MAX_SOLUTIONS
    NODE_LIMIT    = NODE_LIMIT

    PREFLIGHT = PREFLIGHT
    ISOLATE   = ISOLATE

    CP_SAT_SECONDS = CP_SAT_SECONDS
    WORKERS        = WORKERS
    MAX_MEMORY_MB  = MAX_MEMORY_MB

    PROGRESS_EVERY = PROGRESS_EVERY

    SOLUTIONS_OUT = SOLUTIONS_OUT
    MAX_RETURNED  = MAX_RETURNED


__all__ = ["CFG"]
