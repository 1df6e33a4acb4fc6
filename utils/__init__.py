"""
Utilities package for Liquid Law.

This package contains the error taxonomy and audit logging shared by the services.
"""

__version__ = "1.0.0"
__all__ = ['audit_logger', 'error_handling']
