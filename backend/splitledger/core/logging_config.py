import logging

from splitledger.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger once for scripts and workers embedding the ledger."""
    logging.basicConfig(level=(level or settings.log_level).upper(), format=LOG_FORMAT)
    # asyncpg/sqlalchemy chatter stays at warning unless explicitly asked for
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
