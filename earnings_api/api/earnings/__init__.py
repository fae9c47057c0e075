"""User-facing earnings endpoints"""
