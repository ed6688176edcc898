"""
HTTP API for the Golden AI gateway.
"""
