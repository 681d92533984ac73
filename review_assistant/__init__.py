"""
AI Code Review Assistant.

Reviews staged git changes and commits with a local or remote LLM and
stores the results for a review dashboard.
"""

__version__ = "1.0.0"
