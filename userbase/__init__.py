"""
Userbase - Session-based user authentication

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- errors: Authentication failure taxonomy and results
- store: Credential persistence (users and sessions tables)
- session: Login session lifecycle
- auth: Sign up, sign in, sign out, session authentication
- api: HTTP models and session cookies
- middleware: Per-request session gate
"""

__version__ = "1.0.0"
