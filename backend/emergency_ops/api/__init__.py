"""
HTTP surface of the emergency operations dashboard.
"""
