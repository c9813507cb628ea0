# attribution-engine - Components
# Each component: models, ports (where it has its own), component entry points
