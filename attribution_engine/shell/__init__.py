# attribution-engine - Imperative Shell
# Event wiring between the host application and the components
