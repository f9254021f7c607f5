from fastapi import APIRouter, Depends

from dependencies import CurrentUser, get_accounts, get_current_user
from models import ChangePasswordRequest, GoogleAuthRequest, SigninRequest, SignupRequest
from services.accounts import AccountService

router = APIRouter(tags=["auth"])


@router.post("/signup")
def signup(request: SignupRequest, accounts: AccountService = Depends(get_accounts)):
    account = accounts.register(request.fullname, request.email, request.password)
    return accounts.session_payload(account)


@router.post("/signin")
def signin(request: SigninRequest, accounts: AccountService = Depends(get_accounts)):
    account = accounts.authenticate(request.email, request.password)
    return accounts.session_payload(account)


@router.post("/google-auth")
def google_auth(request: GoogleAuthRequest, accounts: AccountService = Depends(get_accounts)):
    account = accounts.authenticate_federated(request.access_token)
    return accounts.session_payload(account)


@router.post("/change-password")
def change_password(
    request: ChangePasswordRequest,
    user: CurrentUser = Depends(get_current_user),
    accounts: AccountService = Depends(get_accounts),
):
    accounts.reissue_credential(user.id, request.currentPassword, request.newPassword)
    return {"status": "Password changed successfully"}
