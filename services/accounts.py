"""Accounts: password and federated sign-in, credentials and profiles."""

import logging
import secrets
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlparse

from config import Settings
from errors import Conflict, Forbidden, NotFound, ValidationFailed, WrongSignInMethod
from security import create_access_token, hash_password, is_valid_email, is_valid_password, verify_password
from services.common import utcnow
from store import ASC, USERS, Store

logger = logging.getLogger(__name__)

BIO_LIMIT = 150
SEARCH_USERS_LIMIT = 50
SOCIAL_NETWORKS = ("youtube", "instagram", "facebook", "twitter", "github", "website")
AVATAR_URL = "https://api.dicebear.com/6.x/notionists-neutral/svg?seed={seed}"
PASSWORD_RULES = (
    "Password must be 6 to 20 characters long and contain at least one numeric digit, "
    "one uppercase and one lowercase letter"
)

IdTokenVerifier = Callable[[str], Dict[str, Any]]


class AccountService:
    def __init__(self, store: Store, settings: Settings, verify_id_token: Optional[IdTokenVerifier] = None):
        self.store = store
        self.settings = settings
        self.verify_id_token = verify_id_token

    # --- session -------------------------------------------------------

    def session_payload(self, account: Dict[str, Any]) -> Dict[str, Any]:
        info = account["personal_info"]
        admin = bool(account.get("admin", False))
        return {
            "access_token": create_access_token(
                account["_id"],
                admin,
                self.settings.secret_access_key,
                self.settings.access_token_ttl_minutes,
            ),
            "profile_img": info.get("profile_img"),
            "username": info["username"],
            "fullname": info["fullname"],
            "isAdmin": admin,
        }

    # --- handles -------------------------------------------------------

    def handle_taken(self, username: str) -> bool:
        return self.store.exists(USERS, [("personal_info.username", "==", username)])

    def generate_username(self, email: str) -> str:
        # A single retry with a random suffix; a second collision is not handled.
        username = email.split("@")[0]
        if self.handle_taken(username):
            username += secrets.token_hex(3)[:5]
        return username

    def _create_account(self, fullname: str, email: str, password_hash: Optional[str],
                        google_auth: bool, profile_img: Optional[str] = None) -> Dict[str, Any]:
        username = self.generate_username(email)
        account_id = self.store.new_id(USERS)
        account = {
            "personal_info": {
                "fullname": fullname,
                "email": email,
                "password": password_hash,
                "username": username,
                "bio": "",
                "profile_img": profile_img or AVATAR_URL.format(seed=username),
            },
            "search_username": username.lower(),
            "social_links": {network: "" for network in SOCIAL_NETWORKS},
            "account_info": {"total_posts": 0, "total_reads": 0},
            "google_auth": google_auth,
            "admin": False,
            "blogs": [],
            "joinedAt": utcnow(),
        }
        with self.store.unit_of_work() as uow:
            uow.set(USERS, account_id, account)
        logger.info("Account %s created for %s", username, email)
        return dict(account, _id=account_id)

    def _find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return self.store.find_one(USERS, [("personal_info.email", "==", email)])

    # --- identity verifier ----------------------------------------------

    def register(self, fullname: str, email: str, password: str) -> Dict[str, Any]:
        if len(fullname) < 3:
            raise ValidationFailed("Fullname must be at least 3 characters long")
        if not email:
            raise ValidationFailed("Email is required")
        if not is_valid_email(email):
            raise ValidationFailed("Email is not valid")
        if not is_valid_password(password):
            raise ValidationFailed(PASSWORD_RULES)
        if self._find_by_email(email):
            raise Conflict("Email already exists")

        password_hash = hash_password(password, self.settings.bcrypt_rounds)
        return self._create_account(fullname, email, password_hash, google_auth=False)

    def authenticate(self, email: str, password: str) -> Dict[str, Any]:
        account = self._find_by_email(email)
        if account is None:
            raise NotFound("Email not found")
        if account.get("google_auth"):
            raise WrongSignInMethod("This email has signed up with Google. Please log in with Google.")
        if not verify_password(password, account["personal_info"].get("password")):
            raise Forbidden("Password is incorrect")
        return account

    def authenticate_federated(self, id_token: str) -> Dict[str, Any]:
        try:
            decoded = self.verify_id_token(id_token)
        except Exception as exc:
            logger.warning("Federated token rejected: %s", exc)
            raise Forbidden("Failed to authenticate with Google. Try another account.")

        email = decoded.get("email")
        if not email:
            raise Forbidden("Failed to authenticate with Google. Try another account.")
        name = decoded.get("name") or email.split("@")[0]
        picture = (decoded.get("picture") or "").replace("s96-c", "s384-c")

        account = self._find_by_email(email)
        if account is not None:
            if not account.get("google_auth"):
                raise WrongSignInMethod(
                    "This email has signed up with password. Please log in with password."
                )
            return account
        return self._create_account(name, email, None, google_auth=True, profile_img=picture or None)

    def reissue_credential(self, account_id: str, current_password: str, new_password: str) -> None:
        if not is_valid_password(current_password) or not is_valid_password(new_password):
            raise ValidationFailed(PASSWORD_RULES)

        account = self.store.get(USERS, account_id)
        if account is None:
            raise NotFound("User not found")
        if account.get("google_auth"):
            raise WrongSignInMethod(
                "You can not change password for account because you have logged in through google"
            )
        if not verify_password(current_password, account["personal_info"].get("password")):
            raise Forbidden("Current password is incorrect")

        with self.store.unit_of_work() as uow:
            uow.update(USERS, account_id, {
                "personal_info.password": hash_password(new_password, self.settings.bcrypt_rounds),
            })

    # --- profiles -------------------------------------------------------

    def get_profile(self, username: str) -> Dict[str, Any]:
        account = self.store.find_one(USERS, [("personal_info.username", "==", username)])
        if account is None:
            raise NotFound("User not found")
        info = dict(account["personal_info"])
        info.pop("password", None)
        return {
            "_id": account["_id"],
            "personal_info": info,
            "social_links": account.get("social_links", {}),
            "account_info": account.get("account_info", {}),
            "joinedAt": account.get("joinedAt"),
        }

    def search_users(self, query: str):
        prefix = (query or "").lower()
        users = self.store.find(
            USERS,
            [("search_username", ">=", prefix), ("search_username", "<=", prefix + "\uf8ff")],
            order_by=[("search_username", ASC)],
            limit=SEARCH_USERS_LIMIT,
        )
        return [
            {"personal_info": {k: user["personal_info"].get(k) for k in ("fullname", "username", "profile_img")}}
            for user in users
        ]

    def update_profile_img(self, account_id: str, url: str) -> str:
        with self.store.unit_of_work() as uow:
            uow.update(USERS, account_id, {"personal_info.profile_img": url})
        return url

    def update_profile(self, account_id: str, username: str, bio: str, social_links: Dict[str, str]) -> str:
        if len(username) < 3:
            raise ValidationFailed("Username must be at least 3 characters long")
        if len(bio) > BIO_LIMIT:
            raise ValidationFailed(f"Bio must be less than {BIO_LIMIT} characters long")

        for network, link in social_links.items():
            if not link:
                continue
            parsed = urlparse(link)
            if parsed.scheme not in ("http", "https") or not parsed.hostname:
                raise ValidationFailed("Please provide valid social links with http(s) included")
            if network != "website" and f"{network}.com" not in parsed.hostname:
                raise ValidationFailed(f"Please provide a valid {network} link")

        current = self.store.get(USERS, account_id)
        if current is None:
            raise NotFound("User not found")
        if current["personal_info"]["username"] != username and self.handle_taken(username):
            raise Conflict("Username already taken")

        with self.store.unit_of_work() as uow:
            uow.update(USERS, account_id, {
                "personal_info.username": username,
                "personal_info.bio": bio,
                "search_username": username.lower(),
                "social_links": social_links,
            })
        logger.info("User profile updated successfully %s", username)
        return username
