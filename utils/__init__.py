"""
Shared Utilities - Configuration, Logging, Schemas, Errors and HTTP Retries
"""
