"""
Settings, dependency wiring and the domain error hierarchy.
"""
