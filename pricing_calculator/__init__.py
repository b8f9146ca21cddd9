"""Basket pricing calculator.

Prices baskets of articles for customers, applying per-customer discount
factors, and exposes the computation over HTTP.
"""
