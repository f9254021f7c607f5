from fastapi import APIRouter, Depends

from dependencies import CurrentUser, get_blogs, get_current_user
from models import (
    BlogRefRequest,
    CreateBlogRequest,
    DeleteBlogRequest,
    GetBlogRequest,
    LatestBlogsRequest,
    LikeBlogRequest,
    SearchBlogsCountRequest,
    SearchBlogsRequest,
    UserBlogsCountRequest,
    UserBlogsRequest,
)
from services.blogs import BlogService

router = APIRouter(tags=["blogs"])


@router.post("/latest-blogs")
def latest_blogs(request: LatestBlogsRequest, blogs: BlogService = Depends(get_blogs)):
    return {"blogs": blogs.latest(request.page)}


@router.post("/all-latest-blogs-count")
def all_latest_blogs_count(blogs: BlogService = Depends(get_blogs)):
    return {"totalDocs": blogs.latest_count()}


@router.get("/trending-blogs")
def trending_blogs(blogs: BlogService = Depends(get_blogs)):
    return {"blogs": blogs.trending()}


@router.post("/search-blogs")
def search_blogs(request: SearchBlogsRequest, blogs: BlogService = Depends(get_blogs)):
    found = blogs.search(
        tag=request.tag,
        query=request.query,
        author=request.author,
        page=request.page,
        limit=request.limit,
        eliminate_blog=request.eliminate_blog,
    )
    return {"blogs": found}


@router.post("/search-blogs-count")
def search_blogs_count(request: SearchBlogsCountRequest, blogs: BlogService = Depends(get_blogs)):
    return {"totalDocs": blogs.search_count(request.tag, request.query, request.author)}


@router.post("/get-blog")
def get_blog(request: GetBlogRequest, blogs: BlogService = Depends(get_blogs)):
    return {"blog": blogs.get(request.blog_id, draft=request.draft, mode=request.mode)}


@router.post("/create-blog")
def create_blog(
    request: CreateBlogRequest,
    user: CurrentUser = Depends(get_current_user),
    blogs: BlogService = Depends(get_blogs),
):
    return {"id": blogs.create(user.id, user.admin, request)}


@router.post("/delete-blog")
def delete_blog(
    request: DeleteBlogRequest,
    user: CurrentUser = Depends(get_current_user),
    blogs: BlogService = Depends(get_blogs),
):
    blogs.delete(user.admin, request.blog_id)
    return {"status": "done"}


@router.post("/user-written-blogs")
def user_written_blogs(
    request: UserBlogsRequest,
    user: CurrentUser = Depends(get_current_user),
    blogs: BlogService = Depends(get_blogs),
):
    found = blogs.written_by(
        user.id,
        request.page,
        draft=request.draft,
        query=request.query,
        deleted_doc_count=request.deleted_doc_count,
    )
    return {"blogs": found}


@router.post("/user-written-blogs-count")
def user_written_blogs_count(
    request: UserBlogsCountRequest,
    user: CurrentUser = Depends(get_current_user),
    blogs: BlogService = Depends(get_blogs),
):
    return {"totalDocs": blogs.written_by_count(user.id, draft=request.draft, query=request.query)}


@router.post("/like-blog")
def like_blog(
    request: LikeBlogRequest,
    user: CurrentUser = Depends(get_current_user),
    blogs: BlogService = Depends(get_blogs),
):
    return {"liked_by_user": blogs.toggle_like(user.id, request.id, request.isLikedByUser)}


@router.post("/is-liked-by-user")
def is_liked_by_user(
    request: BlogRefRequest,
    user: CurrentUser = Depends(get_current_user),
    blogs: BlogService = Depends(get_blogs),
):
    return {"result": blogs.is_liked(user.id, request.id)}
