"""
Availability engine - weekly schedules, date overrides and schedule summaries.
"""

__version__ = "0.1.0"
