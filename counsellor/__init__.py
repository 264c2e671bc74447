"""
counsellor - conversation budgeting and personal-details learning for a journaling assistant
"""

__version__ = "0.1.0"
