"""
Rehab Analytics

Assessment comparison and progress-analytics engine for a rehabilitation
program dashboard.
"""
__version__ = "1.0.0"
