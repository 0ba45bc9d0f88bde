# stock_analytics/__init__.py

"""
Batch analysis of historical stock prices.

This package handles:
- loading & cleaning a price file
- daily return, average return, traded value and volatility views
- UP/DOWN/UNCHANGED classification (logistic regression)
- close price regression (linear regression)
- saving views and fitted models to disk
"""
