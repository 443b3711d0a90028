import secrets

from fastapi import HTTPException, Security
from fastapi.security.api_key import APIKeyHeader

from . import config

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def require_api_key(api_key: str = Security(api_key_header)):
    """Only callers holding the configured key may submit jobs."""
    if not api_key:
        raise HTTPException(status_code=401, detail="Missing X-API-Key header")
    if not secrets.compare_digest(api_key.encode(), config.API_KEY.encode()):
        raise HTTPException(status_code=403, detail="Invalid API key")
    return True
