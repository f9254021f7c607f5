from fastapi import APIRouter, Depends

from dependencies import CurrentUser, get_current_user, get_notifications
from models import NotificationsCountRequest, NotificationsRequest
from services.notifications import NotificationService

router = APIRouter(tags=["notifications"])


@router.get("/new-notification")
def new_notification(
    user: CurrentUser = Depends(get_current_user),
    notifications: NotificationService = Depends(get_notifications),
):
    return {"new_notification_available": notifications.has_new(user.id)}


@router.post("/notifications")
def list_notifications(
    request: NotificationsRequest,
    user: CurrentUser = Depends(get_current_user),
    notifications: NotificationService = Depends(get_notifications),
):
    page = notifications.feed(
        user.id, request.page, kind=request.filter, deleted_doc_count=request.deleted_doc_count
    )
    return {"notifications": page}


@router.post("/all-notifications-count")
def all_notifications_count(
    request: NotificationsCountRequest,
    user: CurrentUser = Depends(get_current_user),
    notifications: NotificationService = Depends(get_notifications),
):
    return {"totalDocs": notifications.count(user.id, request.filter)}
