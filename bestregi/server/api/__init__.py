"""
JSON API routes served alongside the MVC endpoints.
"""
