"""
Core domain models, mathematical primitives, and invariants.

This module contains the foundational building blocks of the options risk
engine that are independent of external collaborators (price feeds, custody).
"""
