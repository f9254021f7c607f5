from fastapi import APIRouter, Depends

from dependencies import CurrentUser, get_accounts, get_current_user
from models import ProfileRequest, SearchUsersRequest, UpdateProfileImgRequest, UpdateProfileRequest
from services.accounts import AccountService

router = APIRouter(tags=["users"])


@router.post("/search-users")
def search_users(request: SearchUsersRequest, accounts: AccountService = Depends(get_accounts)):
    return {"users": accounts.search_users(request.query)}


@router.post("/get-profile")
def get_profile(request: ProfileRequest, accounts: AccountService = Depends(get_accounts)):
    return accounts.get_profile(request.username)


@router.post("/update-profile-img")
def update_profile_img(
    request: UpdateProfileImgRequest,
    user: CurrentUser = Depends(get_current_user),
    accounts: AccountService = Depends(get_accounts),
):
    return {"profile_img": accounts.update_profile_img(user.id, request.url)}


@router.post("/update-profile")
def update_profile(
    request: UpdateProfileRequest,
    user: CurrentUser = Depends(get_current_user),
    accounts: AccountService = Depends(get_accounts),
):
    username = accounts.update_profile(user.id, request.username, request.bio, request.social_links)
    return {"username": username}
