"""Database fixtures for CollectionQL tests (shared)."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Post, PostComment, PostStatus, User


async def create_sample_users(session: AsyncSession):
    """Create and commit the sample users used across tests and demos."""
    users = [
        User(name="Alice Johnson", email="alice@example.com", is_admin=True),
        User(name="Bob Smith", email="bob@example.com", is_admin=False),
        User(name="Charlie Brown", email="charlie@example.com", is_admin=False),
        User(name="Dave NoPosts", email="dave@example.com", is_admin=False),
    ]
    session.add_all(users)
    await session.flush()
    await session.commit()
    return users


@pytest.fixture(scope="function")
async def sample_users(db_session: AsyncSession):
    return await create_sample_users(db_session)


async def create_sample_posts(session: AsyncSession, users):
    """Create and commit the sample posts."""
    user1, user2, user3, _ = users
    posts = [
        Post(title="First Post", content="Hello world!", author_id=user1.id,
             status=PostStatus.PUBLISHED, metadata_json={"tags": ["intro", "hello"], "views": 10}),
        Post(title="GraphQL is Great", content="I love GraphQL!", author_id=user1.id,
             status=PostStatus.PUBLISHED, metadata_json={"tags": ["graphql"]}),
        Post(title="SQLAlchemy Tips", content="Some useful tips...", author_id=user2.id,
             status=PostStatus.DRAFT, metadata_json=None),
        Post(title="Draft from Charlie", content=None, author_id=user3.id,
             status=PostStatus.ARCHIVED, metadata_json=None),
    ]
    session.add_all(posts)
    await session.flush()
    await session.commit()
    return posts


@pytest.fixture(scope="function")
async def sample_posts(db_session: AsyncSession, sample_users):
    return await create_sample_posts(db_session, sample_users)


async def create_sample_comments(session: AsyncSession, users, posts):
    """Create and commit comments spread across posts and authors."""
    user1, user2, user3, _ = users
    post1, post2, post3, _ = posts
    comments = [
        PostComment(content="Great post!", rate=5, post_id=post1.id, author_id=user2.id),
        PostComment(content="Thanks for sharing", rate=4, post_id=post1.id, author_id=user3.id),
        PostComment(content="Very helpful", rate=3, post_id=post2.id, author_id=user2.id),
        PostComment(content="Nice tips", rate=2, post_id=post3.id, author_id=user1.id),
    ]
    session.add_all(comments)
    await session.flush()
    await session.commit()
    return comments


@pytest.fixture(scope="function")
async def sample_comments(db_session: AsyncSession, sample_users, sample_posts):
    return await create_sample_comments(db_session, sample_users, sample_posts)


@pytest.fixture(scope="function")
async def populated_db(sample_users, sample_posts, sample_comments):
    """Users, posts and comments, committed."""
    return {
        'users': sample_users,
        'posts': sample_posts,
        'comments': sample_comments,
    }
