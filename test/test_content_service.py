"""
Tests for Content Service

Blog posts and projects over the fake backend.
"""

from datetime import datetime, timedelta, timezone

import pytest

from devfolio.exceptions import BlogNotFoundError, ProjectNotFoundError
from devfolio.schemas.content import BlogPostCreate, BlogPostUpdate, ProjectCreate, ProjectUpdate
from devfolio.services import content_service

NOW = datetime.now(timezone.utc)


class TestBlogPosts:
    """Test blog post CRUD"""

    @pytest.mark.asyncio
    async def test_create_and_get(self, backend):
        """Test a created post can be fetched"""
        created = await content_service.create_blog(
            backend, BlogPostCreate(title="Hello", body="First *post*", tags="python, fastapi , ")
        )

        fetched = await content_service.get_blog(backend, created.id)

        assert fetched.title == "Hello"
        assert fetched.tags == ["python", "fastapi"]

    @pytest.mark.asyncio
    async def test_get_missing_raises(self, backend):
        """Test a missing post raises BlogNotFoundError"""
        with pytest.raises(BlogNotFoundError):
            await content_service.get_blog(backend, "missing")

    @pytest.mark.asyncio
    async def test_list_newest_first(self, backend):
        """Test posts are listed by creation date, newest first"""
        backend.seed(
            "blogs",
            {"id": "old", "title": "Old", "body": "x", "created_at": NOW - timedelta(days=2)},
            {"id": "new", "title": "New", "body": "x", "created_at": NOW},
        )

        blogs = await content_service.list_blogs(backend)

        assert [blog.id for blog in blogs] == ["new", "old"]

    @pytest.mark.asyncio
    async def test_detail_renders_markdown(self, backend):
        """Test the detail view carries HTML and read time"""
        created = await content_service.create_blog(backend, BlogPostCreate(title="T", body="# Heading\n\ntext"))

        detail = await content_service.get_blog_detail(backend, created.id)

        assert "<h1" in detail.html
        assert detail.read_time_minutes == 1

    @pytest.mark.asyncio
    async def test_update_partial(self, backend):
        """Test only the given fields change and updated_at is set"""
        created = await content_service.create_blog(backend, BlogPostCreate(title="T", body="B", tags=["a"]))

        updated = await content_service.update_blog(backend, created.id, BlogPostUpdate(title="T2"))

        assert updated.title == "T2"
        assert updated.body == "B"
        assert updated.tags == ["a"]
        assert updated.updated_at is not None

    @pytest.mark.asyncio
    async def test_update_missing_raises(self, backend):
        with pytest.raises(BlogNotFoundError):
            await content_service.update_blog(backend, "missing", BlogPostUpdate(title="T2"))

    @pytest.mark.asyncio
    async def test_delete(self, backend):
        """Test a deleted post is gone"""
        created = await content_service.create_blog(backend, BlogPostCreate(title="T", body="B"))

        await content_service.delete_blog(backend, created.id)

        with pytest.raises(BlogNotFoundError):
            await content_service.get_blog(backend, created.id)

    @pytest.mark.asyncio
    async def test_delete_missing_raises(self, backend):
        with pytest.raises(BlogNotFoundError):
            await content_service.delete_blog(backend, "missing")


class TestBlogFiltering:
    def test_filter_by_search_and_tag(self):
        """Test case-insensitive search then tag match"""
        from devfolio.schemas.content import BlogPost

        blogs = [
            BlogPost(id="1", title="FastAPI tips", body="...", tags=["python"]),
            BlogPost(id="2", title="Rust notes", body="about fastapi too", tags=["rust"]),
            BlogPost(id="3", title="Gardening", body="...", tags=["life"]),
        ]

        assert [b.id for b in content_service.filter_blogs(blogs, search="fastapi")] == ["1", "2"]
        assert [b.id for b in content_service.filter_blogs(blogs, search="fastapi", tag="rust")] == ["2"]
        assert content_service.collect_tags(blogs) == ["life", "python", "rust"]


class TestProjects:
    """Test project CRUD and filtering"""

    @pytest.mark.asyncio
    async def test_project_lifecycle(self, backend):
        """Test create, update, filter and delete"""
        created = await content_service.create_project(
            backend, ProjectCreate(title="Folio", description="This site", tech_stack="Python,FastAPI")
        )
        assert created.tech_stack == ["Python", "FastAPI"]

        updated = await content_service.update_project(backend, created.id, ProjectUpdate(live_url="https://x.dev"))
        assert updated.live_url == "https://x.dev"

        projects = await content_service.list_projects(backend)
        assert [p.id for p in content_service.filter_projects(projects, tech="FastAPI")] == [created.id]
        assert content_service.filter_projects(projects, search="nothing") == []
        assert content_service.collect_tech(projects) == ["FastAPI", "Python"]

        await content_service.delete_project(backend, created.id)
        with pytest.raises(ProjectNotFoundError):
            await content_service.get_project(backend, created.id)
