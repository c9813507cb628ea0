# attribution-engine - Adapters
# Concrete implementations of core ports
