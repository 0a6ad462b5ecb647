# app/core/auth.py
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from app.config import settings

reusable_oauth2 = HTTPBearer()


async def get_current_caller(
    token: HTTPAuthorizationCredentials = Depends(reusable_oauth2)
) -> str:
    """
    Identity of the caller, as issued by the auth service.

    The token is only decoded here; permissions are checked before requests
    reach this service.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(
            token.credentials,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
        caller_id = payload.get("sub")
        if caller_id is None:
            raise credentials_exception
    except JWTError:
        raise credentials_exception
    return str(caller_id)
