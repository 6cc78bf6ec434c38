"""Comment service layer.

Comments hang off a post and share its visibility: only the post owner and
their friends may read or add comments. Only a comment's author may edit or
delete it.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from huddle.db.models import Comment, Post
from huddle.db.session import transaction
from huddle.errors import ApiErrorCode, ForbiddenError, NotFoundError
from huddle.logging import get_logger
from huddle.schemas.posts import CommentOut
from huddle.services.posts import can_view_posts_of, get_post_or_404
from huddle.services.users import resolve_users

logger = get_logger(__name__)


def _comments_with_authors(db: Session, comments: list[Comment]) -> list[CommentOut]:
    authors = resolve_users(db, {c.user_id for c in comments})
    return [
        CommentOut(
            id=c.id,
            post_id=c.post_id,
            user_id=c.user_id,
            content=c.content,
            created_at=c.created_at,
            updated_at=c.updated_at,
            author=authors.get(c.user_id),
        )
        for c in comments
    ]


def get_comment_for_owner_or_403(db: Session, viewer_id: UUID, comment_id: UUID) -> Comment:
    """Load a comment the viewer wrote.

    Raises:
        NotFoundError(E_COMMENT_NOT_FOUND): If the comment does not exist.
        ForbiddenError(E_NOT_OWNER): If the viewer is not the author.
    """
    comment = db.get(Comment, comment_id)
    if comment is None:
        raise NotFoundError(ApiErrorCode.E_COMMENT_NOT_FOUND, "Comment not found")
    if comment.user_id != viewer_id:
        raise ForbiddenError(ApiErrorCode.E_NOT_OWNER, "Only the author can modify this comment")
    return comment


def _require_visible_post(db: Session, viewer_id: UUID, post: Post) -> None:
    if not can_view_posts_of(db, viewer_id, post.user_id):
        raise ForbiddenError(ApiErrorCode.E_FORBIDDEN, "Not allowed to view this post")


def create_comment(db: Session, viewer_id: UUID, post_id: UUID, content: str) -> CommentOut:
    """Comment on a post.

    Raises:
        NotFoundError(E_POST_NOT_FOUND): If the post does not exist.
        ForbiddenError(E_FORBIDDEN): If the viewer may not see the post.
    """
    post = get_post_or_404(db, post_id)
    _require_visible_post(db, viewer_id, post)

    comment = Comment(post_id=post_id, user_id=viewer_id, content=content)
    with transaction(db):
        db.add(comment)
        db.flush()

    logger.info("comment_created", comment_id=str(comment.id), post_id=str(post_id))
    return _comments_with_authors(db, [comment])[0]


def list_comments(db: Session, viewer_id: UUID, post_id: UUID) -> list[CommentOut]:
    """Comments on a post, newest first. Empty for a missing post.

    Raises:
        ForbiddenError(E_FORBIDDEN): If the viewer may not see the post.
    """
    post = db.get(Post, post_id)
    if post is None:
        return []
    _require_visible_post(db, viewer_id, post)

    comments = db.scalars(
        select(Comment)
        .where(Comment.post_id == post_id)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
    ).all()
    return _comments_with_authors(db, list(comments))


def update_comment(db: Session, viewer_id: UUID, comment_id: UUID, content: str) -> CommentOut:
    comment = get_comment_for_owner_or_403(db, viewer_id, comment_id)
    with transaction(db):
        comment.content = content

    logger.info("comment_updated", comment_id=str(comment_id))
    return _comments_with_authors(db, [comment])[0]


def delete_comment(db: Session, viewer_id: UUID, comment_id: UUID) -> None:
    comment = get_comment_for_owner_or_403(db, viewer_id, comment_id)
    with transaction(db):
        db.delete(comment)

    logger.info("comment_deleted", comment_id=str(comment_id))
