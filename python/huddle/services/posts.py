"""Post service layer.

Posts are visible to their owner and the owner's accepted friends. Writes
are owner-only. Deleting a post removes its comments and likes in the same
transaction.
"""

from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from huddle.db.models import Comment, Post, PostLike
from huddle.db.session import transaction
from huddle.errors import ApiErrorCode, ForbiddenError, NotFoundError
from huddle.logging import get_logger
from huddle.schemas.posts import CreatePostRequest, PostOut, UpdatePostRequest
from huddle.schemas.users import UserPublicOut
from huddle.services.relationships import are_friends, friend_ids
from huddle.services.users import get_user_or_404, resolve_users

logger = get_logger(__name__)

# =============================================================================
# Shared Helpers
# =============================================================================


def get_post_or_404(db: Session, post_id: UUID) -> Post:
    post = db.get(Post, post_id)
    if post is None:
        raise NotFoundError(ApiErrorCode.E_POST_NOT_FOUND, "Post not found")
    return post


def can_view_posts_of(db: Session, viewer_id: UUID, owner_id: UUID) -> bool:
    return viewer_id == owner_id or are_friends(db, viewer_id, owner_id)


def get_post_for_owner_or_403(db: Session, viewer_id: UUID, post_id: UUID) -> Post:
    """Load a post the viewer owns.

    Raises:
        NotFoundError(E_POST_NOT_FOUND): If the post does not exist.
        ForbiddenError(E_NOT_OWNER): If the viewer is not the author.
    """
    post = get_post_or_404(db, post_id)
    if post.user_id != viewer_id:
        raise ForbiddenError(ApiErrorCode.E_NOT_OWNER, "Only the author can modify this post")
    return post


def _post_to_out(post: Post, author: UserPublicOut | None) -> PostOut:
    return PostOut(
        id=post.id,
        user_id=post.user_id,
        content=post.content,
        media=post.media,
        likes_count=post.likes_count,
        created_at=post.created_at,
        updated_at=post.updated_at,
        author=author,
    )


def _posts_with_authors(db: Session, posts: list[Post]) -> list[PostOut]:
    authors = resolve_users(db, {p.user_id for p in posts})
    return [_post_to_out(p, authors.get(p.user_id)) for p in posts]


# =============================================================================
# Service Functions (One per Route)
# =============================================================================


def create_post(db: Session, viewer_id: UUID, req: CreatePostRequest) -> PostOut:
    post = Post(user_id=viewer_id, content=req.content, media=req.media, likes_count=0)
    with transaction(db):
        db.add(post)
        db.flush()

    logger.info("post_created", post_id=str(post.id))
    return _posts_with_authors(db, [post])[0]


def get_post(db: Session, viewer_id: UUID, post_id: UUID) -> PostOut:
    """Get one post.

    Raises:
        NotFoundError(E_POST_NOT_FOUND): If the post does not exist.
        ForbiddenError(E_FORBIDDEN): If the viewer is neither the author nor
            one of the author's friends.
    """
    post = get_post_or_404(db, post_id)
    if not can_view_posts_of(db, viewer_id, post.user_id):
        raise ForbiddenError(ApiErrorCode.E_FORBIDDEN, "Not allowed to view this post")
    return _posts_with_authors(db, [post])[0]


def update_post(
    db: Session, viewer_id: UUID, post_id: UUID, req: UpdatePostRequest
) -> PostOut:
    """Edit a post's content and/or media. Absent fields stay unchanged."""
    post = get_post_for_owner_or_403(db, viewer_id, post_id)
    changes = req.model_dump(exclude_unset=True)
    # content is required on the row; an explicit null leaves it as is
    if changes.get("content") is None:
        changes.pop("content", None)

    with transaction(db):
        for field, value in changes.items():
            setattr(post, field, value)

    logger.info("post_updated", post_id=str(post_id))
    return _posts_with_authors(db, [post])[0]


def delete_post(db: Session, viewer_id: UUID, post_id: UUID) -> None:
    """Delete a post with its comments and likes, atomically."""
    post = get_post_for_owner_or_403(db, viewer_id, post_id)

    with transaction(db):
        comments = db.execute(delete(Comment).where(Comment.post_id == post_id))
        db.execute(delete(PostLike).where(PostLike.post_id == post_id))
        db.delete(post)

    logger.info("post_deleted", post_id=str(post_id), comments_deleted=comments.rowcount)


def list_user_posts(db: Session, viewer_id: UUID, user_id: UUID) -> list[PostOut]:
    """A user's posts, newest first.

    Raises:
        NotFoundError(E_USER_NOT_FOUND): If the user does not exist.
        ForbiddenError(E_FORBIDDEN): If the viewer may not see their posts.
    """
    get_user_or_404(db, user_id)
    if not can_view_posts_of(db, viewer_id, user_id):
        raise ForbiddenError(ApiErrorCode.E_FORBIDDEN, "Not allowed to view these posts")

    posts = db.scalars(
        select(Post)
        .where(Post.user_id == user_id)
        .order_by(Post.created_at.desc(), Post.id.desc())
    ).all()
    return _posts_with_authors(db, list(posts))


def timeline(db: Session, viewer_id: UUID) -> list[PostOut]:
    """The viewer's posts and their friends' posts, newest first."""
    author_ids = [viewer_id, *friend_ids(db, viewer_id)]
    posts = db.scalars(
        select(Post)
        .where(Post.user_id.in_(author_ids))
        .order_by(Post.created_at.desc(), Post.id.desc())
    ).all()
    return _posts_with_authors(db, list(posts))


def like_post(db: Session, viewer_id: UUID, post_id: UUID) -> PostOut:
    """Like a visible post. Liking twice is a no-op."""
    post = get_post_or_404(db, post_id)
    if not can_view_posts_of(db, viewer_id, post.user_id):
        raise ForbiddenError(ApiErrorCode.E_FORBIDDEN, "Not allowed to view this post")

    try:
        with transaction(db):
            already = db.get(PostLike, (post_id, viewer_id))
            if already is None:
                db.add(PostLike(post_id=post_id, user_id=viewer_id))
                db.flush()
                db.execute(
                    update(Post)
                    .where(Post.id == post_id)
                    .values(likes_count=Post.likes_count + 1)
                )
    except IntegrityError:
        # Concurrent like by the same user already landed
        logger.info("post_like_raced", post_id=str(post_id))

    db.refresh(post)
    return _posts_with_authors(db, [post])[0]


def unlike_post(db: Session, viewer_id: UUID, post_id: UUID) -> PostOut:
    """Remove the viewer's like. Unliking a post not liked is a no-op."""
    post = get_post_or_404(db, post_id)

    with transaction(db):
        removed = db.execute(
            delete(PostLike).where(PostLike.post_id == post_id, PostLike.user_id == viewer_id)
        )
        if removed.rowcount:
            db.execute(
                update(Post)
                .where(Post.id == post_id)
                .values(likes_count=Post.likes_count - 1)
            )

    db.refresh(post)
    return _posts_with_authors(db, [post])[0]
