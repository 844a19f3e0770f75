"""Infrastructure module.

Configuration, logging, database access and the retrieval service client.
"""
