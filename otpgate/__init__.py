"""otpgate - email OTP registration and password login service."""

__version__ = "0.1.0"
