"""
Blog Routes

Public reading endpoints and admin management of blog posts.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from devfolio.auth import get_current_admin
from devfolio.backend.client import HostedBackend
from devfolio.dependencies import get_backend
from devfolio.schemas.content import BlogPost, BlogPostCreate, BlogPostDetail, BlogPostUpdate
from devfolio.services import content_service

router = APIRouter(tags=["Blogs"])
admin_router = APIRouter(tags=["Admin: Blogs"], dependencies=[Depends(get_current_admin)])


@router.get("/blogs", response_model=list[BlogPost])
async def list_blogs(
    search: Optional[str] = Query(None, max_length=200),
    tag: Optional[str] = Query(None, max_length=100),
    backend: HostedBackend = Depends(get_backend),
):
    """List blog posts, newest first, optionally filtered by text search or tag."""
    blogs = await content_service.list_blogs(backend)
    return content_service.filter_blogs(blogs, search=search, tag=tag)


@router.get("/blogs/tags", response_model=list[str])
async def list_tags(backend: HostedBackend = Depends(get_backend)):
    blogs = await content_service.list_blogs(backend)
    return content_service.collect_tags(blogs)


@router.get("/blogs/{blog_id}", response_model=BlogPostDetail)
async def get_blog(blog_id: str, backend: HostedBackend = Depends(get_backend)):
    """Get a blog post with its body rendered to HTML and an estimated read time."""
    return await content_service.get_blog_detail(backend, blog_id)


@admin_router.post("/blogs", response_model=BlogPost, status_code=status.HTTP_201_CREATED)
async def create_blog(data: BlogPostCreate, backend: HostedBackend = Depends(get_backend)):
    return await content_service.create_blog(backend, data)


@admin_router.patch("/blogs/{blog_id}", response_model=BlogPost)
async def update_blog(blog_id: str, data: BlogPostUpdate, backend: HostedBackend = Depends(get_backend)):
    return await content_service.update_blog(backend, blog_id, data)


@admin_router.delete("/blogs/{blog_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_blog(blog_id: str, backend: HostedBackend = Depends(get_backend)) -> None:
    await content_service.delete_blog(backend, blog_id)
