"""
Version 1 of the Community Platform API.
"""
