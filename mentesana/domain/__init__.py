"""
Business operations expressed against the ``Database`` protocol.

Nothing in this package knows which engine is active.
"""
