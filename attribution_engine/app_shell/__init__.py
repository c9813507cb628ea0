# attribution-engine - App Shell
# Command line entry points
