"""
Presentation layer for Veilleur (HTTP API).
"""
