"""Database-backed services used by the routers and the reset scheduler."""
