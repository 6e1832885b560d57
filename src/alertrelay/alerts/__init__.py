"""
Inbound alert handling: decoding, grouping, formatting and dispatch.
"""
