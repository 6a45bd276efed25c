"""
Raw-to-typed value conversion and per-accessor memoization.
"""
