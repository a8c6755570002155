"""
Core package for the election turnout analytics dashboard.

Submodules provide data loading, derived field resolution, filtering,
aggregation, custom scoring, and user interface rendering helpers that are
orchestrated by the top-level `app.py`.
"""

__version__ = "0.1.0"
