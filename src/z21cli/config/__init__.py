"""
Configuration: client settings loaded from layered config files, and the store of named connection profiles.
"""
