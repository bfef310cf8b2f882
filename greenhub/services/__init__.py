"""
Service layer: persistence, sessions, favourites and dataset management.
"""
