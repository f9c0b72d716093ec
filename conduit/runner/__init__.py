"""
conduit.runner - Adapter process entry point.

Builds settings and the ApiClient once and hosts the tool dispatcher.
"""
