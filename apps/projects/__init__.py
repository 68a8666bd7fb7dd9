"""
Projects app: projects, tasks, scoped listings and gated operations.
"""
