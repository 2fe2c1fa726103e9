"""
Identity area: account registration, confirmation, sign-in and management.
"""
