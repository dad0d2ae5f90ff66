from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .db import Board

# Tokens are minted and verified upstream; the bearer value is the user id.
bearer = HTTPBearer(auto_error=False)


def get_current_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer)) -> str:
    user_id = credentials.credentials.strip() if credentials else ""
    if not user_id:
        raise HTTPException(status_code=401, detail="invalid_token")
    return user_id


def check_owner(board: Board, user_id: str) -> None:
    if board.owner != user_id:
        raise HTTPException(status_code=403, detail="forbidden")
