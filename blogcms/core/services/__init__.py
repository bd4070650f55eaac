"""
Pure core services: slugs, text helpers and reading time.
"""
