"""
ai-scripts-and-tools
Command-line helpers that script against local and hosted LLM APIs
"""

__version__ = "1.0.0"
