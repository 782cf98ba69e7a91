"""
Library modules that are shared by the format parsers: reading structured data from memory,
configuration and logging.
"""
