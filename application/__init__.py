"""
Application Layer for the Plates API.

This package contains:
- ports/: Abstract remote client interface (what the store needs)
- exceptions.py: Errors raised by remote clients
"""
