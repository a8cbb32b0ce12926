"""
Repository layer for data access operations.

This package contains repository modules that encapsulate database queries
for questions, answers and accounts, and translate backend failures into
the service's error taxonomy.
"""
