"""
Categories Module

Category records stored in each tenant database.
"""
