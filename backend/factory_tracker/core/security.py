# backend/factory_tracker/core/security.py
"""Password hashing for the seeded admin account."""
import bcrypt


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")
