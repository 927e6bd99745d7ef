"""Business logic layer for accounts app.

- Authorization gate and session tokens
- Identity & claims store
- Account lifecycle (admin only)
- Access grants (tier access, administrator elevation)
"""
