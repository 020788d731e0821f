from fastapi import APIRouter, Depends, HTTPException, Request
from starlette import status

from lavajato.auth_utils import (
    CredentialStore, get_credential_store, get_current_role, require_admin,
)
from lavajato.models.auth import LoginRequest, PasswordChange, Role, SessionInfo

router = APIRouter(prefix="/auth", tags=["auth"])


# --- ROTA 1: PROCESSAR O LOGIN ---
@router.post("/login", response_model=SessionInfo, name="login")
def login(
    request: Request,
    credentials: LoginRequest,
    store: CredentialStore = Depends(get_credential_store),
):
    """O usuário é o nome do perfil (admin ou funcionario)."""
    try:
        role = Role(credentials.username.strip().lower())
    except ValueError:
        role = None

    if role is None or not store.verify(role, credentials.password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuário ou senha inválidos."
        )

    # Salva o perfil na sessão (cookie assinado)
    request.session["role"] = role.value
    return SessionInfo(role=role)


# --- ROTA 2: LOGOUT ---
@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, name="logout")
def logout(request: Request):
    """Limpa a sessão do usuário."""
    request.session.clear()


# --- ROTA 3: PERFIL LOGADO ---
@router.get("/me", response_model=SessionInfo, name="me")
def me(role: Role = Depends(get_current_role)):
    return SessionInfo(role=role)


# --- ROTA 4: TROCAR SENHA DE UM PERFIL (só admin) ---
@router.put("/passwords/{role}", status_code=status.HTTP_204_NO_CONTENT, name="change_password")
def change_password(
    role: Role,
    payload: PasswordChange,
    _: Role = Depends(require_admin),
    store: CredentialStore = Depends(get_credential_store),
):
    if payload.new_password != payload.confirm_password:
        raise HTTPException(status_code=400, detail="As senhas não coincidem.")
    store.set(role, payload.new_password)
