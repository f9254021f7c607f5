from routers import auth, blogs, comments, notifications, uploads, users

all_routers = [
    auth.router,
    users.router,
    blogs.router,
    comments.router,
    notifications.router,
    uploads.router,
]
