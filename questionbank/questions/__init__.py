"""
Question API module.

HTTP endpoints for creating, listing, updating and deleting questions.
"""
