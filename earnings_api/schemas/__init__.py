"""Shared schema building blocks"""
