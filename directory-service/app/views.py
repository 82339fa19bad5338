import logging
import os
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from app.constants import DEFAULT_PAGE_SIZE
from app.hooks import DirectoryHooks
from app.pagination import page_count, pagination_controls, parse_page_param

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=os.path.join(os.path.dirname(__file__), "templates"))

router = APIRouter(prefix="/ui")


def format_post_date(value: str) -> str:
    """ISO timestamp to e.g. June 5, 2024, 02:30 PM; unparseable values pass through."""
    try:
        dt = datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return value or ""
    return f"{dt:%B} {dt.day}, {dt.year}, {dt:%I:%M %p}"


def page_url(page_number):
    # page 1 keeps the URL clean
    return "/ui/" if page_number == 1 else f"/ui/?page={page_number}"


templates.env.filters["post_date"] = format_post_date
templates.env.globals["page_url"] = page_url


def get_hooks(request: Request):
    return request.app.state.hooks


@router.get("/", name="users_table")
async def users_table(request: Request, page: Optional[str] = None, hooks: DirectoryHooks = Depends(get_hooks)):
    current_page = parse_page_param(page)
    try:
        users = await hooks.users(current_page - 1, DEFAULT_PAGE_SIZE)
        total = (await hooks.users_count()).count
    except Exception as e:
        logger.error("Failed to load users: %s", e)
        return templates.TemplateResponse(
            request,
            "error.html",
            {"title": "Users", "message": "Failed to load users", "back_url": None},
            status_code=500,
        )
    count = page_count(total, DEFAULT_PAGE_SIZE)
    return templates.TemplateResponse(
        request,
        "users_table.html",
        {
            "users": users,
            "page_number": current_page,
            "page_count": count,
            "controls": pagination_controls(current_page, count),
        },
    )


async def render_user_posts(
    request: Request,
    hooks: DirectoryHooks,
    user_id: str,
    *,
    new_post: bool = False,
    selected_post_id: Optional[str] = None,
    delete_post_id: Optional[str] = None,
    form: Optional[dict] = None,
    errors: Optional[dict] = None,
    failure: Optional[str] = None,
    status_code: int = 200,
):
    try:
        user = await hooks.user(user_id)
        posts = await hooks.user_posts(user_id) or []
    except Exception as e:
        logger.error("Failed to load posts for user %s: %s", user_id, e)
        return templates.TemplateResponse(
            request,
            "error.html",
            {"title": "User", "message": "Failed to load posts", "back_url": "/ui/"},
            status_code=500,
        )
    by_id = {post.id: post for post in posts}
    return templates.TemplateResponse(
        request,
        "user_posts.html",
        {
            "user": user,
            "posts": posts,
            "new_post": new_post,
            "selected_post": by_id.get(selected_post_id),
            "post_to_delete": by_id.get(delete_post_id),
            "form": form or {"title": "", "body": ""},
            "errors": errors or {},
            "failure": failure,
        },
        status_code=status_code,
    )


@router.get("/users/{user_id}", name="user_posts")
async def user_posts(
    request: Request,
    user_id: str,
    new: Optional[str] = None,
    post: Optional[str] = None,
    delete: Optional[str] = None,
    hooks: DirectoryHooks = Depends(get_hooks),
):
    return await render_user_posts(
        request,
        hooks,
        user_id,
        new_post=bool(new),
        selected_post_id=post,
        delete_post_id=delete,
    )


def validate_post_form(title, body):
    errors = {}
    if not title:
        errors["title"] = "Post title is required"
    if not body:
        errors["body"] = "Post content is required"
    return errors


@router.post("/users/{user_id}/posts")
async def submit_new_post(
    request: Request,
    user_id: str,
    title: str = Form(""),
    body: str = Form(""),
    hooks: DirectoryHooks = Depends(get_hooks),
):
    title, body = title.strip(), body.strip()
    form = {"title": title, "body": body}
    errors = validate_post_form(title, body)
    if errors:
        return await render_user_posts(request, hooks, user_id, new_post=True, form=form, errors=errors, status_code=400)
    try:
        await hooks.create_post(title, body, user_id)
    except Exception as e:
        logger.error("Failed to create post: %s", e)
        return await render_user_posts(
            request,
            hooks,
            user_id,
            new_post=True,
            form=form,
            failure="Failed to create post. Please try again.",
            status_code=502,
        )
    return RedirectResponse(f"/ui/users/{user_id}", status_code=303)


@router.post("/users/{user_id}/posts/{post_id}/delete")
async def confirm_delete_post(
    request: Request,
    user_id: str,
    post_id: str,
    hooks: DirectoryHooks = Depends(get_hooks),
):
    try:
        await hooks.delete_post(post_id, user_id)
    except Exception as e:
        logger.error("Failed to delete post: %s", e)
        return await render_user_posts(
            request,
            hooks,
            user_id,
            delete_post_id=post_id,
            failure="Failed to delete post. Please try again.",
            status_code=502,
        )
    return RedirectResponse(f"/ui/users/{user_id}", status_code=303)
