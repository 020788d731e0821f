import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from lavajato.config import settings
from lavajato.exceptions import LavajatoError

logger = logging.getLogger(__name__)

# 1. Engine de Conexão
# A string de conexão vem da configuração (DATABASE_URL)
SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL

engine_kwargs = {}
if SQLALCHEMY_DATABASE_URL.startswith("sqlite"):
    # 'check_same_thread' é necessário apenas para SQLite
    engine_kwargs["connect_args"] = {"check_same_thread": False}
    if SQLALCHEMY_DATABASE_URL in ("sqlite://", "sqlite:///:memory:"):
        # Banco em memória: todas as sessões precisam da mesma conexão
        engine_kwargs["poolclass"] = StaticPool

engine = create_engine(SQLALCHEMY_DATABASE_URL, **engine_kwargs)

# 2. Fábrica de Sessões
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# 3. Base Declarativa
# Nossas classes de modelo herdarão desta
Base = declarative_base()


# --- Função helper para obter a sessão ---
def get_db():
    """Função helper para gerenciar a sessão do banco de dados."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session):
    """
    Escopo transacional: tudo o que for escrito dentro do bloco é salvo
    junto (commit) ou descartado junto (rollback).
    """
    try:
        yield db
        db.commit()
    except LavajatoError as e:
        db.rollback()
        logger.info("Operação cancelada: %s", e.message)
        raise
    except Exception:
        db.rollback()
        logger.exception("Erro inesperado, transação desfeita (rollback)")
        raise
