"""
Infrastructure layer for Veilleur.
"""
