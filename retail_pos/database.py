"""Database configuration and initialization."""
from sqlalchemy import BigInteger, Integer, create_engine, event, text
from sqlalchemy.orm import scoped_session, sessionmaker, declarative_base

# Create SQLAlchemy base
Base = declarative_base()

# SQLite only autoincrements INTEGER PRIMARY KEY columns
IdType = BigInteger().with_variant(Integer, 'sqlite')

# Global session and engine
engine = None
db_session = None


def _build_engine(database_uri, echo=False):
    """Create the engine; SQLite gets its own pool settings and FK enforcement."""
    if database_uri.startswith('sqlite'):
        sqlite_engine = create_engine(
            database_uri,
            echo=echo,
            # Writers queue on the database lock instead of failing fast
            connect_args={'timeout': 15, 'check_same_thread': False},
        )

        @event.listens_for(sqlite_engine, 'connect')
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute('PRAGMA foreign_keys=ON')
            cursor.close()

        return sqlite_engine

    return create_engine(
        database_uri,
        echo=echo,
        pool_pre_ping=True,  # Enable connection health checks
        pool_size=10,
        max_overflow=20
    )


def init_db(app):
    """Initialize database connection."""
    global engine, db_session

    database_uri = app.config['SQLALCHEMY_DATABASE_URI']
    engine = _build_engine(database_uri, echo=app.config.get('SQLALCHEMY_ECHO', False))

    db_session = scoped_session(
        sessionmaker(autocommit=False, autoflush=False, bind=engine)
    )

    Base.query = db_session.query_property()

    # Register teardown
    @app.teardown_appcontext
    def shutdown_session(exception=None):
        """Close database session and rollback on error."""
        if exception:
            db_session.rollback()
        db_session.remove()


def create_all():
    """Create every table known to the models package."""
    from retail_pos import models  # noqa: F401
    Base.metadata.create_all(bind=engine)


def drop_all():
    """Drop every table (tests and local resets only)."""
    from retail_pos import models  # noqa: F401
    Base.metadata.drop_all(bind=engine)


def is_sqlite(session):
    """True when the session is bound to a SQLite database."""
    return session.get_bind().dialect.name == 'sqlite'


def begin_write_transaction(session):
    """
    Open a transaction that serializes writers.

    SQLite ignores SELECT ... FOR UPDATE, so the write lock is taken up front
    with BEGIN IMMEDIATE. Other backends rely on row locks taken by the caller.
    """
    if is_sqlite(session):
        session.execute(text('BEGIN IMMEDIATE'))


def get_session():
    """Get database session."""
    return db_session
