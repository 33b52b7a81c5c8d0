import secrets
import string
from uuid import uuid4

SLUG_ALPHABET = string.ascii_lowercase + string.digits

def new_id() -> str:
    return str(uuid4())

def random_slug(length: int = 8) -> str:
    """Identificador corto [a-z0-9] para URLs públicas."""
    return "".join(secrets.choice(SLUG_ALPHABET) for _ in range(length))
