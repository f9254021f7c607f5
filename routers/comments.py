from fastapi import APIRouter, Depends

from dependencies import CurrentUser, get_comments, get_current_user
from models import AddCommentRequest, BlogCommentsRequest, BlogRefRequest, RepliesRequest
from services.comments import CommentService

router = APIRouter(tags=["comments"])


@router.post("/add-comment")
def add_comment(
    request: AddCommentRequest,
    user: CurrentUser = Depends(get_current_user),
    comments: CommentService = Depends(get_comments),
):
    return comments.add(
        user.id,
        request.id,
        request.comment,
        replying_to=request.replying_to,
        notification_id=request.notification_id,
    )


@router.post("/get-blog-comments")
def get_blog_comments(request: BlogCommentsRequest, comments: CommentService = Depends(get_comments)):
    return comments.for_blog(request.blog_id, request.skip)


@router.post("/get-replies")
def get_replies(request: RepliesRequest, comments: CommentService = Depends(get_comments)):
    return {"replies": comments.replies(request.id, request.skip)}


@router.post("/delete-comment")
def delete_comment(
    request: BlogRefRequest,
    user: CurrentUser = Depends(get_current_user),
    comments: CommentService = Depends(get_comments),
):
    removed = comments.delete_thread(user.id, request.id)
    return {"status": "done", "removed": removed}
