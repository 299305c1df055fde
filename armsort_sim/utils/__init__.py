"""
Shared constants and small stateless helpers.
"""
