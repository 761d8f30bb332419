"""
Adapters: trend models and persistence.
"""
