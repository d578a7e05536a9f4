"""
Property admin console package.
"""
