"""
RBAC (Role-Based Access Control) application.

Provides:
- Seeded user identities with one of three roles
- Static role to capability permission table
- Ownership- and assignment-aware authorization engine
- Guarded role changes (no caller may change their own role)
"""
