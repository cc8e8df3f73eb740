"""
Small building blocks shared across the client: event sources and value-object mixins.
"""
