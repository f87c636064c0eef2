"""
Shared components for Veilleur services.

Provides component reporting and health-check primitives.
"""
