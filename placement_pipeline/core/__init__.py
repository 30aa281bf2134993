"""
Core module - configuration, authentication and the error taxonomy.
"""
