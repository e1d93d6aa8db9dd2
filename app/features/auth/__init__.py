"""
Login, session info and self-service profile.
"""
