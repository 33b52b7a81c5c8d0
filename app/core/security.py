import time, httpx
from jose import jwt
from functools import lru_cache
from app.core.config import settings

JWKS_TTL_SECONDS = 300

@lru_cache(maxsize=1)
def _jwks_cached():
    # Cachea JWKS ~5 min por proceso
    return {"jwks": None, "ts": 0}

async def get_jwks():
    cache = _jwks_cached()
    if not cache["jwks"] or time.time() - cache["ts"] > JWKS_TTL_SECONDS:
        async with httpx.AsyncClient(timeout=5) as client:
            r = await client.get(settings.supabase_jwks_url)
            r.raise_for_status()
            cache["jwks"] = r.json()
            cache["ts"] = time.time()
    return cache["jwks"]

def _issuer() -> str:
    return f"{settings.supabase_project_url}/auth/v1"

async def verify_supabase_token(token: str) -> dict:
    header = jwt.get_unverified_header(token)
    algorithm = header.get("alg", "")

    if algorithm == "HS256":
        # Token firmado con HMAC - usar el JWT secret
        return jwt.decode(
            token,
            settings.supabase_jwt_secret,
            algorithms=["HS256"],
            audience="authenticated",
            issuer=_issuer(),
        )

    if algorithm.startswith("RS") or algorithm.startswith("ES"):
        # Token firmado con clave asimétrica - usar JWKS
        jwks = await get_jwks()
        key = next((k for k in jwks.get("keys", []) if k.get("kid") == header.get("kid")), None)
        if not key:
            raise ValueError("JWKS key not found")
        return jwt.decode(
            token,
            key,
            algorithms=[key.get("alg", algorithm)],
            audience="authenticated",
            issuer=_issuer(),
        )

    raise ValueError(f"Unsupported algorithm: {algorithm}")
