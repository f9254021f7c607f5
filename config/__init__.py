import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel


class Settings(BaseModel):
    secret_access_key: str
    credentials_path: Optional[Path] = None
    firebase_project_id: Optional[str] = None

    cloudinary_cloud_name: Optional[str] = None
    cloudinary_api_key: Optional[str] = None
    cloudinary_api_secret: Optional[str] = None
    cloudinary_upload_folder: Optional[str] = None

    access_token_ttl_minutes: Optional[int] = None
    bcrypt_rounds: int = 10
    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"
    port: int = 3000

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()

        secret = os.environ.get("SECRET_ACCESS_KEY")
        if not secret:
            raise ValueError("SECRET_ACCESS_KEY environment variable not set.")

        cred_path = os.environ.get("GOOGLE_APPLICATION_CREDENTIALS")
        if not cred_path:
            raise ValueError("GOOGLE_APPLICATION_CREDENTIALS environment variable not set.")

        cred_path = Path(cred_path).expanduser().resolve()
        if not cred_path.is_file():
            raise FileNotFoundError(f"Firebase credential file not found: {cred_path}")

        ttl = os.environ.get("ACCESS_TOKEN_TTL_MINUTES")
        origins = os.environ.get("CORS_ORIGINS", "*")

        return cls(
            secret_access_key=secret,
            credentials_path=cred_path,
            firebase_project_id=os.environ.get("FIREBASE_PROJECT_ID") or None,
            cloudinary_cloud_name=os.environ.get("CLOUDINARY_CLOUD_NAME"),
            cloudinary_api_key=os.environ.get("CLOUDINARY_API_KEY"),
            cloudinary_api_secret=os.environ.get("CLOUDINARY_API_SECRET"),
            cloudinary_upload_folder=os.environ.get("CLOUDINARY_UPLOAD_FOLDER") or None,
            access_token_ttl_minutes=int(ttl) if ttl else None,
            bcrypt_rounds=int(os.environ.get("BCRYPT_ROUNDS", "10")),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
            port=int(os.environ.get("PORT", "3000")),
        )
