"""Core business logic layer.

Subpackages:
- dates: Monday-first week math and month grids
- planning: the plan coordinator (week/month assignments, drag & drop)
- shopping: building shopping lists
"""
__all__ = ["dates", "planning", "shopping"]
