"""
Application Layer for the Progressive Overload API.

This package contains:
- ports/: Abstract repository interfaces (what the engine's callers need)
- use_cases/: Workflows coordinating the engine and the ports
- exceptions.py: Application-level errors
"""
