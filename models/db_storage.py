from models.user import User
from models.refresh_token import RefreshToken
from models.blog import Blog
from models.comment import Comment
from models.like import Like
from sqlalchemy import create_engine, event
from sqlalchemy.orm import scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.exc import SQLAlchemyError
from models.base_model import Base

# Models the storage facade serves
classes = {
    "User": User,
    "RefreshToken": RefreshToken,
    "Blog": Blog,
    "Comment": Comment,
    "Like": Like,
}


class DBStorage:
    __engine = None
    __session = None

    def init_app(self, app):
        """Bind engine and session to the app's DATABASE_URL and create tables"""
        url = app.config["DATABASE_URL"]
        kwargs = {"echo": app.config.get("SQLALCHEMY_ECHO", False)}
        if url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if url in ("sqlite://", "sqlite:///:memory:"):
                # One shared connection so every session sees the same in-memory DB
                kwargs["poolclass"] = StaticPool
        else:
            kwargs["pool_pre_ping"] = True

        if self.__session is not None:
            self.__session.remove()
        if self.__engine is not None:
            self.__engine.dispose()
        self.__engine = create_engine(url, **kwargs)

        # Enable SQLite foreign keys (needed for ON DELETE CASCADE)
        if self.__engine.url.get_backend_name() == "sqlite":
            @event.listens_for(self.__engine, "connect")
            def _set_sqlite_pragma(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

        self.reload()

    def reload(self):
        """Create tables and start session"""
        Base.metadata.create_all(self.__engine)
        session_factory = sessionmaker(bind=self.__engine, expire_on_commit=False)
        self.__session = scoped_session(session_factory)

    def new(self, obj):
        """Add object to session"""
        self.__session.add(obj)

    def save(self):
        """Commit session"""
        try:
            self.__session.commit()
        except SQLAlchemyError:
            self.__session.rollback()
            raise

    def rollback(self):
        self.__session.rollback()

    def delete(self, obj=None):
        """Delete object if exists (hard delete)"""
        if obj:
            self.__session.delete(obj)

    def get(self, cls, id):
        """Fetch one object by class and ID"""
        if cls in classes.values():
            return self.__session.get(cls, id)
        return None

    def count(self, cls=None):
        """Count rows of one model, or of every model when cls is None"""
        targets = [cls] if cls else list(classes.values())
        return sum(self.__session.query(model).count() for model in targets)

    def close(self):
        """Remove session (for API teardown)"""
        if self.__session is not None:
            self.__session.remove()

    # expose the SQLAlchemy session for advanced querying (joins, filters, etc.)
    def get_session(self):
        return self.__session
