"""Shared validators package for the application.

This package contains reusable validation functions that can be used
across different features and schemas.

Available validators:
- password.py: Password length policy (8 to 64 characters)
- email.py: Case-insensitive email normalization
"""
