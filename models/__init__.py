"""
models/ - Domain Models
=======================
Plain dataclasses shared by the repository and service layers.
"""
