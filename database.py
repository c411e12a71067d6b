import logging
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from sqlalchemy.exc import SQLAlchemyError

from config import Config

logger = logging.getLogger(__name__)

Base = declarative_base()


class ScriptureStore:
    """Owns the engine and session factory for one scripture database.

    Stores are constructed explicitly and handed to the import pipeline,
    lookup and autocomplete layers, so each test can work against its own
    in-memory database.
    """

    def __init__(self, database_url=None, echo=False):
        self.database_url = database_url or Config.DATABASE_URL
        engine_kwargs = {'echo': echo}
        if self.database_url.startswith('sqlite'):
            engine_kwargs['connect_args'] = {'check_same_thread': False}
            if self.database_url in ('sqlite://', 'sqlite:///:memory:'):
                # every session must see the same in-memory database
                engine_kwargs['poolclass'] = StaticPool
        self.engine = create_engine(self.database_url, **engine_kwargs)
        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=self.engine
        )

    @classmethod
    def in_memory(cls):
        store = cls('sqlite://')
        store.init_db()
        return store

    def init_db(self):
        """Create the versions/books/verses tables if they are missing."""
        import models  # noqa: F401  registers the tables on Base.metadata
        logger.info(f"Initializing scripture tables on {self.engine.url.render_as_string(hide_password=True)}")
        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def session(self):
        """Provide a transactional scope around a series of operations."""
        db = self.SessionLocal()
        try:
            yield db
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"SQLAlchemy Session Error: {e}")
            raise
        except Exception as e:
            db.rollback()
            logger.error(f"General Session Error: {e}")
            raise
        finally:
            db.close()

    # --- Queries ---

    def list_versions(self):
        from models.bible import BibleVersion
        with self.session() as db:
            return db.query(BibleVersion).order_by(BibleVersion.name).all()

    def get_version(self, version_id):
        from models.bible import BibleVersion
        with self.session() as db:
            return db.get(BibleVersion, version_id)

    def list_books(self, version_id=None):
        from models.bible import BibleBook
        with self.session() as db:
            query = db.query(BibleBook)
            if version_id:
                query = query.filter(BibleBook.version == version_id)
            return query.order_by(BibleBook.version, BibleBook.name).all()

    def chapter_verses(self, version_id, book_id, chapter):
        """Prefix scan over the (version, book_id, chapter) index."""
        from models.bible import BibleVerse
        with self.session() as db:
            return db.query(BibleVerse).filter(
                BibleVerse.version == version_id,
                BibleVerse.book_id == book_id,
                BibleVerse.chapter == chapter,
            ).all()

    def count_verses(self, version_id=None):
        from models.bible import BibleVerse
        with self.session() as db:
            query = db.query(BibleVerse)
            if version_id:
                query = query.filter(BibleVerse.version == version_id)
            return query.count()

    def count_books(self, version_id=None):
        from models.bible import BibleBook
        with self.session() as db:
            query = db.query(BibleBook)
            if version_id:
                query = query.filter(BibleBook.version == version_id)
            return query.count()

    def uninstall_version(self, version_id):
        """Delete a version with all of its books and verses in one transaction.

        Returns False when the version was not installed.
        """
        from models.bible import BibleVersion, BibleBook, BibleVerse
        with self.session() as db:
            version = db.get(BibleVersion, version_id)
            if version is None:
                return False
            verse_count = db.query(BibleVerse).filter(BibleVerse.version == version_id).delete(synchronize_session=False)
            book_count = db.query(BibleBook).filter(BibleBook.version == version_id).delete(synchronize_session=False)
            db.delete(version)
        logger.info(f"Uninstalled {version_id}: removed {book_count} books and {verse_count} verses")
        return True
