"""Utility module for autoupdater.

This module provides cross-cutting utilities:
- Logging: Configured logging with secret redaction
- Validators: Input validation for repository names, hosts and limits
"""
