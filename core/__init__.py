# Core package - foundational components
#
# Modules:
# - config: Application settings
# - logging: Structured logging
# - ids: Record identifier generation
# - storage: Persistence gateways (MongoDB, in-memory)
