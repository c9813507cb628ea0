# attribution-engine - Functional Core
# Pure classification logic and port definitions; no I/O
