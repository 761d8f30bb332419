"""
Water chemistry trend forecasting and retrospective accuracy validation.
"""
__version__ = "0.1.0"
