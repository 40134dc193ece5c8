"""
Optional server features
"""
