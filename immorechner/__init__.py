"""
Immorechner: real estate investment calculator for German rental properties.
"""
