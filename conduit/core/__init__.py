"""
conduit.core - Adapter core (tool boundary).
"""
