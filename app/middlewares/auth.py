import logging
from typing import Optional
import httpx
from fastapi import Header, HTTPException, Depends
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.security import verify_supabase_token
from app.db.models.profile import Profile
from app.db.session import get_session

logger = logging.getLogger(__name__)

def _unauthorized() -> HTTPException:
    return HTTPException(status_code=401, detail="Unauthorized", headers={"WWW-Authenticate": "Bearer"})

async def current_user(
    authorization: Optional[str] = Header(default=None),
    session: AsyncSession = Depends(get_session),
):
    if not authorization or not authorization.lower().startswith("bearer "):
        raise _unauthorized()
    token = authorization.split(" ", 1)[1].strip()
    try:
        claims = await verify_supabase_token(token)
    except (JWTError, ValueError, KeyError) as e:
        logger.info("[AUTH] rejected token: %s", e)
        raise _unauthorized()
    except httpx.HTTPError as e:
        # sin JWKS no se puede verificar la firma
        logger.warning("[AUTH] JWKS unavailable: %s", e)
        raise _unauthorized()

    sub = claims.get("sub")
    if not sub:
        raise _unauthorized()

    # Sin perfil no hay acceso: el usuario existe en Supabase pero no en la app
    profile = await session.get(Profile, sub)
    if not profile:
        raise _unauthorized()

    # devolvemos claims mínimos
    return {"sub": profile.id, "email": profile.email or claims.get("email"), "name": profile.name}
