"""
Person Directory service application package.

Contains the caching attribute lookup, its cache stores, the directory
client it wraps and the FastAPI application exposing them.
"""
