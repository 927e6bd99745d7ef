"""Business logic layer for tiering app.

- Hot-tier listing, upload and delete
- Archive (hot -> cold) and retrieve (cold -> hot) transfers
- Cold-tier metadata index and its drift checks

Operations take an explicit caller context and injected tier adapters.
"""
