"""
Utility helpers: logging, error handling, monitoring and request context
"""
