"""
API v1 package.

Contains versioned API routes for OTP registration and login.
"""

from otpgate.api.v1.routes import router

__all__ = ["router"]
