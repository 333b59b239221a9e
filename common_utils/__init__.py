"""
Shared helpers for the Carpool API: authentication and authorization.
"""
