"""Admin endpoints"""
