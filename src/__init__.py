"""
Flight Price Analysis
=====================

Route-level flight price analysis and forecasting:
- Season classification and recommended travel periods
- Duration-range trip pricing and week-before/after comparisons
- Gradient-boosted price forecasts with confidence bands
"""

__version__ = "1.0.0"
