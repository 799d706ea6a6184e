# accounts/__init__.py
"""
Accounts app - authentication and company membership.

This app provides:
- Company: the practice whose books are kept
- User: custom user model with active_company
- CompanyMembership: user-company relationship with a role
- AppPermission: capability codes granted per membership
- ActorContext: authorization context utilities
"""
