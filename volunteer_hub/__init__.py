# volunteer_hub/__init__.py
"""
Volunteer Hub application package
"""
