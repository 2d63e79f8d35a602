"""
Contacts Module

Contact records stored in each tenant database.
"""
