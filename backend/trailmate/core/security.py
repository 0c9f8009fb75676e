import hashlib
import hmac
import secrets

from .config import settings

HASH_SCHEME = "pbkdf2_sha256"


def get_password_hash(password: str) -> str:
    """Hash a password as ``scheme$iterations$salt$digest``."""
    salt = secrets.token_hex(16)
    iterations = settings.PASSWORD_HASH_ITERATIONS
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), iterations)
    return f"{HASH_SCHEME}${iterations}${salt}${digest.hex()}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a password against a stored hash."""
    try:
        scheme, iterations, salt, expected = hashed_password.split("$")
        iterations = int(iterations)
    except ValueError:
        return False

    if scheme != HASH_SCHEME:
        return False

    digest = hashlib.pbkdf2_hmac("sha256", plain_password.encode(), salt.encode(), iterations)
    return hmac.compare_digest(digest.hex(), expected)


def generate_session_token() -> str:
    """Opaque token stored in the session cookie."""
    return secrets.token_urlsafe(32)
