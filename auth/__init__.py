"""
auth — User account authentication module.

Provides:
  • Password hashing (bcrypt, work factor 14)
  • HS256 bearer token issue & validation
  • Register / Login / Details API routes
  • ``get_current_user_id`` FastAPI dependency
"""
