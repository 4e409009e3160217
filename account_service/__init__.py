"""
Account Service - user accounts, password rotation and bearer tokens.
"""
