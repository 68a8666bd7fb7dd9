"""
Core plumbing shared by every app: exceptions, logging, middleware,
authentication and capability permissions.
"""
