"""
Script services: commit message generation and provider comparison
"""
