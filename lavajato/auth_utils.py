import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request
from passlib.context import CryptContext
from sqlalchemy.orm import Session
from starlette import status

from lavajato.config import settings
from lavajato.database import SessionLocal, get_db
from lavajato.database_models import RoleCredential
from lavajato.exceptions import ValidationError
from lavajato.models.auth import Role

logger = logging.getLogger(__name__)

# Configura o algoritmo de hashing
pwd_context = CryptContext(schemes=["scrypt"], deprecated="auto")

MIN_PASSWORD_LENGTH = 4


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verifica se a senha pura corresponde ao hash salvo."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Gera um hash para a senha pura."""
    return pwd_context.hash(password)


class CredentialStore:
    """Onde ficam as senhas dos perfis (admin / funcionario)."""

    def get(self, role: Role) -> Optional[str]:
        raise NotImplementedError

    def set(self, role: Role, value: str) -> None:
        raise NotImplementedError

    def verify(self, role: Role, password: str) -> bool:
        stored = self.get(role)
        return stored is not None and verify_password(password, stored)


class DatabaseCredentialStore(CredentialStore):
    """Guarda o hash da senha de cada perfil na tabela role_credentials."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, role: Role) -> Optional[str]:
        credential = self.db.get(RoleCredential, Role(role).value)
        return credential.password_hash if credential else None

    def set(self, role: Role, value: str) -> None:
        if len(value) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"A senha deve ter pelo menos {MIN_PASSWORD_LENGTH} caracteres.")
        role = Role(role)
        credential = self.db.get(RoleCredential, role.value)
        if credential is None:
            credential = RoleCredential(role=role.value, password_hash="")
            self.db.add(credential)
        credential.password_hash = get_password_hash(value)
        self.db.commit()


def get_credential_store(db: Session = Depends(get_db)) -> CredentialStore:
    return DatabaseCredentialStore(db)


def create_default_credentials_if_not_exist():
    """Cria as senhas padrão dos perfis que ainda não têm senha."""
    defaults = {
        Role.ADMIN: settings.DEFAULT_ADMIN_PASSWORD,
        Role.EMPLOYEE: settings.DEFAULT_EMPLOYEE_PASSWORD,
    }

    db = SessionLocal()
    try:
        store = DatabaseCredentialStore(db)
        for role, password in defaults.items():
            if store.get(role) is None:
                store.set(role, password)
                logger.info("Senha padrão do perfil '%s' criada.", role.value)
    finally:
        db.close()


# --- Dependências de autenticação das rotas ---
def get_current_role(request: Request) -> Role:
    """Perfil logado na sessão. Sem sessão, 401."""
    role = request.session.get("role")
    if not role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Faça login para continuar."
        )
    return Role(role)


def require_admin(role: Role = Depends(get_current_role)) -> Role:
    if role != Role.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Acesso restrito ao administrador."
        )
    return role
