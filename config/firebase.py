import firebase_admin
from firebase_admin import credentials

from config import Settings


def init_firebase(settings: Settings) -> firebase_admin.App:
    # Initialize Firebase
    cred = credentials.Certificate(str(settings.credentials_path))
    options = {}
    if settings.firebase_project_id:
        options["projectId"] = settings.firebase_project_id
    return firebase_admin.initialize_app(cred, options)
