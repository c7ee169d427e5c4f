from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine,async_sessionmaker,AsyncSession
from sqlalchemy.pool import NullPool
from storefront.config.settings import config_settings
from storefront.db.utils import _normalize_db_url, is_sqlite_url

DATABASE_URL=_normalize_db_url(config_settings.DATABASE_URL)


def _serialize_sqlite_writers(engine):
    # sqlite has no row locks (FOR UPDATE is dropped), so every transaction takes the write lock upfront
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


if is_sqlite_url(DATABASE_URL):
    async_engine=create_async_engine(DATABASE_URL,echo=config_settings.DB_ECHO,poolclass=NullPool,
                                     connect_args={"timeout": 30})
    _serialize_sqlite_writers(async_engine)
else:
    async_engine=create_async_engine(DATABASE_URL,echo=config_settings.DB_ECHO,pool_pre_ping=True)

async_session=async_sessionmaker(bind=async_engine,class_=AsyncSession,expire_on_commit=False)
