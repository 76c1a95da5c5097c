"""
PageOrganizer - Utils Package

Utility modules for the application.
"""
