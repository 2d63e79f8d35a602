"""
Contact Management Platform

Multi-tenant contact and category management on per-tenant MongoDB databases.
"""

__version__ = "0.1.0"
