"""
Script utilities: shell commands and git access
"""
