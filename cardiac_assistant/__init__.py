"""
Conversation routing and thread continuity for the cardiac care assistant.
"""

__version__ = "0.1.0"
