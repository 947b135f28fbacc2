"""
Configuration, errors, logging and money helpers.
"""
