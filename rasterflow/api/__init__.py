"""
HTTP API for rasterflow
"""
