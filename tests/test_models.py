"""
Tests for the persistence layer: BaseModel helpers, storage facade and
ON DELETE CASCADE behaviour.
"""
import pytest
from sqlalchemy.exc import IntegrityError

from models import storage
from models.blog import Blog, BlogStatus
from models.comment import Comment
from models.like import Like
from models.refresh_token import RefreshToken
from models.user import Role, User


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield app


def make_user(email="m@x.com", username="model-user", role=Role.USER):
    user = User(username=username, email=email, password_hash="hash", role=role)
    user.save()
    return user


def make_blog(author, status=BlogStatus.DRAFT):
    blog = Blog(title="T", slug=f"t-{author.id[:8]}", content="C", author_id=author.id)
    blog.set_status(status)
    blog.save()
    return blog


class TestBaseModel:
    def test_defaults(self, ctx):
        user = make_user()
        assert len(user.id) == 36
        assert user.created_at is not None
        assert user.updated_at >= user.created_at
        assert str(user) == f"[User] ({user.id})"

    def test_to_dict_hides_password_hash(self, ctx):
        data = make_user().to_dict()
        assert "password_hash" not in data
        assert "_sa_instance_state" not in data
        assert data["email"] == "m@x.com"
        assert isinstance(data["created_at"], str)

    def test_password_is_write_only(self, ctx):
        with pytest.raises(AttributeError):
            make_user().password


class TestStorage:
    def test_get_and_count(self, ctx):
        user = make_user()
        assert storage.get(User, user.id) is user
        assert storage.get(User, "00000000-0000-0000-0000-000000000000") is None
        assert storage.count(User) == 1
        assert storage.count() == 1

    def test_save_rolls_back_on_error(self, ctx):
        make_user()
        storage.new(User(username="model-user", email="dup@x.com", password_hash="hash"))
        with pytest.raises(IntegrityError):
            storage.save()
        assert storage.count(User) == 1

    def test_refresh_token_ledger(self, ctx):
        user = make_user()
        RefreshToken.insert("a.b.c", user.id)
        storage.save()
        assert RefreshToken.exists("a.b.c")
        assert RefreshToken.delete_by_token("a.b.c") == 1
        storage.save()
        assert not RefreshToken.exists("a.b.c")
        assert RefreshToken.delete_by_token("a.b.c") == 0


class TestBlogModel:
    def test_first_publish_is_stamped_once(self, ctx):
        blog = make_blog(make_user())
        assert blog.published_at is None
        blog.set_status(BlogStatus.PUBLISHED)
        first = blog.published_at
        assert first is not None
        blog.set_status(BlogStatus.DRAFT)
        blog.set_status(BlogStatus.PUBLISHED)
        assert blog.published_at == first

    def test_like_is_unique_per_user(self, ctx):
        user = make_user()
        blog = make_blog(user, BlogStatus.PUBLISHED)
        storage.new(Like(blog_id=blog.id, user_id=user.id))
        storage.save()
        storage.new(Like(blog_id=blog.id, user_id=user.id))
        with pytest.raises(IntegrityError):
            storage.save()

    def test_deleting_a_user_cascades(self, ctx):
        user = make_user()
        blog = make_blog(user, BlogStatus.PUBLISHED)
        storage.new(Comment(blog_id=blog.id, user_id=user.id, content="hi"))
        storage.new(Like(blog_id=blog.id, user_id=user.id))
        RefreshToken.insert("a.b.c", user.id)
        storage.save()

        user.delete()
        storage.save()
        storage.close()

        for model in (User, Blog, Comment, Like, RefreshToken):
            assert storage.count(model) == 0
