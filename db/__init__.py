"""
db/ - Database Layer
====================
Owns the database connection, scoped transactions and schema initialization.
This layer is the lowest in the architecture and has no dependencies on other layers.
"""
