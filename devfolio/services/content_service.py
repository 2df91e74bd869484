"""
Content Service

Blog posts and project listings stored in the hosted backend, plus the
in-memory search and filtering used by the public listing pages.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from devfolio.backend.client import HostedBackend, Order, eq
from devfolio.exceptions import BackendError, BlogNotFoundError, ProjectNotFoundError
from devfolio.schemas.content import (
    BlogPost,
    BlogPostCreate,
    BlogPostDetail,
    BlogPostUpdate,
    Project,
    ProjectCreate,
    ProjectUpdate,
)
from devfolio.services.reporting import estimate_read_time
from devfolio.utils.markdown import render_markdown
from devfolio.utils.metrics import record_content_operation

logger = logging.getLogger(__name__)

BLOGS_TABLE = "blogs"
PROJECTS_TABLE = "projects"

NEWEST_FIRST = Order("created_at", ascending=False)


# ============================================================================
# Blog posts
# ============================================================================


async def list_blogs(backend: HostedBackend) -> list[BlogPost]:
    rows = await backend.select(BLOGS_TABLE, order=NEWEST_FIRST)
    return [BlogPost.model_validate(row) for row in rows]


async def get_blog(backend: HostedBackend, blog_id: str) -> BlogPost:
    """
    Fetch one blog post.

    Raises:
        BlogNotFoundError: If no post has this ID.
    """
    rows = await backend.select(BLOGS_TABLE, filters=[eq("id", blog_id)], limit=1)
    if not rows:
        raise BlogNotFoundError(blog_id)
    return BlogPost.model_validate(rows[0])


async def get_blog_detail(backend: HostedBackend, blog_id: str) -> BlogPostDetail:
    """Blog post with its rendered HTML and estimated read time."""
    blog = await get_blog(backend, blog_id)
    return BlogPostDetail(
        **blog.model_dump(),
        html=render_markdown(blog.body),
        read_time_minutes=estimate_read_time(blog.body),
    )


async def create_blog(backend: HostedBackend, data: BlogPostCreate) -> BlogPost:
    rows = await backend.insert(BLOGS_TABLE, data.model_dump())
    if not rows:
        raise BackendError("Backend returned no row for created blog", operation=f"insert:{BLOGS_TABLE}")
    blog = BlogPost.model_validate(rows[0])
    record_content_operation("blog", "create")
    logger.info(f"Blog created successfully: {blog.id}")
    return blog


async def update_blog(backend: HostedBackend, blog_id: str, data: BlogPostUpdate) -> BlogPost:
    values = data.model_dump(exclude_unset=True)
    values["updated_at"] = datetime.now(timezone.utc).isoformat()
    rows = await backend.update(BLOGS_TABLE, values, [eq("id", blog_id)])
    if not rows:
        raise BlogNotFoundError(blog_id)
    record_content_operation("blog", "update")
    logger.info(f"Blog updated successfully: {blog_id}")
    return BlogPost.model_validate(rows[0])


async def delete_blog(backend: HostedBackend, blog_id: str) -> None:
    await get_blog(backend, blog_id)
    await backend.delete(BLOGS_TABLE, [eq("id", blog_id)])
    record_content_operation("blog", "delete")
    logger.info(f"Blog deleted: {blog_id}")


def filter_blogs(blogs: list[BlogPost], search: Optional[str] = None, tag: Optional[str] = None) -> list[BlogPost]:
    """Case-insensitive search over title and body, then exact tag match."""
    filtered = blogs
    if search:
        term = search.lower()
        filtered = [blog for blog in filtered if term in blog.title.lower() or term in blog.body.lower()]
    if tag:
        filtered = [blog for blog in filtered if tag in blog.tags]
    return filtered


def collect_tags(blogs: list[BlogPost]) -> list[str]:
    return sorted({tag for blog in blogs for tag in blog.tags})


# ============================================================================
# Projects
# ============================================================================


async def list_projects(backend: HostedBackend) -> list[Project]:
    rows = await backend.select(PROJECTS_TABLE, order=NEWEST_FIRST)
    return [Project.model_validate(row) for row in rows]


async def get_project(backend: HostedBackend, project_id: str) -> Project:
    rows = await backend.select(PROJECTS_TABLE, filters=[eq("id", project_id)], limit=1)
    if not rows:
        raise ProjectNotFoundError(project_id)
    return Project.model_validate(rows[0])


async def create_project(backend: HostedBackend, data: ProjectCreate) -> Project:
    rows = await backend.insert(PROJECTS_TABLE, data.model_dump())
    if not rows:
        raise BackendError("Backend returned no row for created project", operation=f"insert:{PROJECTS_TABLE}")
    project = Project.model_validate(rows[0])
    record_content_operation("project", "create")
    logger.info(f"Project created successfully: {project.id}")
    return project


async def update_project(backend: HostedBackend, project_id: str, data: ProjectUpdate) -> Project:
    rows = await backend.update(PROJECTS_TABLE, data.model_dump(exclude_unset=True), [eq("id", project_id)])
    if not rows:
        raise ProjectNotFoundError(project_id)
    record_content_operation("project", "update")
    return Project.model_validate(rows[0])


async def delete_project(backend: HostedBackend, project_id: str) -> None:
    await get_project(backend, project_id)
    await backend.delete(PROJECTS_TABLE, [eq("id", project_id)])
    record_content_operation("project", "delete")
    logger.info(f"Project deleted: {project_id}")


def filter_projects(
    projects: list[Project], search: Optional[str] = None, tech: Optional[str] = None
) -> list[Project]:
    """Case-insensitive search over title and description, then exact tech match."""
    filtered = projects
    if search:
        term = search.lower()
        filtered = [p for p in filtered if term in p.title.lower() or term in p.description.lower()]
    if tech:
        filtered = [p for p in filtered if tech in p.tech_stack]
    return filtered


def collect_tech(projects: list[Project]) -> list[str]:
    return sorted({tech for project in projects for tech in project.tech_stack})
