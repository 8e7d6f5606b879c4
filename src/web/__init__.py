"""
HTTP surface: signaling endpoint and observation status.
"""
