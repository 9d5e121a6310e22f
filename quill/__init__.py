"""
Quill - users and posts behind role-based access control.
"""

__version__ = "0.1.0"
