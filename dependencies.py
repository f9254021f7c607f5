from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from errors import Unauthenticated
from security import decode_access_token
from services.accounts import AccountService
from services.blogs import BlogService
from services.comments import CommentService
from services.notifications import NotificationService
from store import Store

bearer_scheme = HTTPBearer(auto_error=False)


class CurrentUser(BaseModel):
    id: str
    admin: bool = False


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("No access token")
    claims = decode_access_token(credentials.credentials, request.app.state.settings.secret_access_key)
    return CurrentUser(id=claims["id"], admin=bool(claims.get("admin")))


def get_accounts(request: Request, store: Store = Depends(get_store)) -> AccountService:
    return AccountService(store, request.app.state.settings, request.app.state.verify_id_token)


def get_blogs(store: Store = Depends(get_store)) -> BlogService:
    return BlogService(store)


def get_comments(store: Store = Depends(get_store)) -> CommentService:
    return CommentService(store)


def get_notifications(store: Store = Depends(get_store)) -> NotificationService:
    return NotificationService(store)
