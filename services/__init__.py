"""
services/ - Business Logic Layer
================================
Validates input, calls repositories and turns storage failures into result values.
"""
