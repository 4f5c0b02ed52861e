"""
Use Cases

Organized into domain folders:
- auth/: Login, registration, tokens, password reset
- users/: Approval, deletion, roles, sessions, profile

Import from subdirectories.
"""
