"""
Domain layer: models, ports and the forecasting pipeline.
"""
