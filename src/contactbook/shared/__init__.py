"""
Shared infrastructure: configuration of the database, logging, sessions and
request handling used by every feature package.
"""
