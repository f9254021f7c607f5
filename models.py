from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Literal, Optional

# Request bodies. Field names follow the JSON sent by the frontend.

NotificationFilter = Literal["all", "like", "comment", "reply"]


class SignupRequest(BaseModel):
    fullname: str = ""
    email: str = ""
    password: str = ""


class SigninRequest(BaseModel):
    email: str = ""
    password: str = ""


class GoogleAuthRequest(BaseModel):
    access_token: str


class ChangePasswordRequest(BaseModel):
    currentPassword: str = ""
    newPassword: str = ""


class UpdateProfileImgRequest(BaseModel):
    url: str


class UpdateProfileRequest(BaseModel):
    username: str = ""
    bio: str = ""
    social_links: Dict[str, str] = {}


class SearchUsersRequest(BaseModel):
    query: str = ""


class ProfileRequest(BaseModel):
    username: str


class LatestBlogsRequest(BaseModel):
    page: int = Field(1, ge=1)


class SearchBlogsCountRequest(BaseModel):
    tag: Optional[str] = None
    query: Optional[str] = None
    author: Optional[str] = None


class SearchBlogsRequest(SearchBlogsCountRequest):
    page: int = Field(1, ge=1)
    limit: Optional[int] = Field(None, ge=1)
    eliminate_blog: Optional[str] = None


# Editor.js output: {"time": ..., "blocks": [...], "version": ...}
class BlogContent(BaseModel):
    model_config = ConfigDict(extra="allow")

    blocks: List[Dict[str, Any]] = []


class CreateBlogRequest(BaseModel):
    title: str = ""
    des: str = ""
    banner: str = ""
    tags: List[str] = []
    content: BlogContent = BlogContent()
    draft: bool = False
    id: Optional[str] = None


class GetBlogRequest(BaseModel):
    blog_id: str
    draft: bool = False
    mode: Optional[str] = None


class DeleteBlogRequest(BaseModel):
    blog_id: str


class BlogRefRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")


class LikeBlogRequest(BlogRefRequest):
    isLikedByUser: bool = False


class AddCommentRequest(BlogRefRequest):
    comment: str = ""
    blog_author: Optional[str] = None
    replying_to: Optional[str] = None
    notification_id: Optional[str] = None


class BlogCommentsRequest(BaseModel):
    blog_id: str
    skip: int = Field(0, ge=0)


class RepliesRequest(BlogRefRequest):
    skip: int = Field(0, ge=0)


class NotificationsCountRequest(BaseModel):
    filter: NotificationFilter = "all"


class NotificationsRequest(NotificationsCountRequest):
    page: int = Field(1, ge=1)
    deleted_doc_count: int = Field(
        0, ge=0, validation_alias=AliasChoices("deletedDocCount", "deleteDocCount", "deleted_doc_count")
    )


class UserBlogsCountRequest(BaseModel):
    draft: bool = False
    query: str = ""


class UserBlogsRequest(UserBlogsCountRequest):
    page: int = Field(1, ge=1)
    deleted_doc_count: int = Field(
        0, ge=0, validation_alias=AliasChoices("deletedDocCount", "deleted_doc_count")
    )
