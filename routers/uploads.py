from fastapi import APIRouter, Request

from services.uploads import generate_upload_url

router = APIRouter(tags=["uploads"])


# upload image url route
@router.get("/get-upload-url")
def get_upload_url(request: Request):
    return generate_upload_url(request.app.state.settings.cloudinary_upload_folder)
