"""
Configuração da aplicação (lida do ambiente e do arquivo .env)
"""
import sys
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- LÓGICA DE CAMINHO ---
# (Garante que o banco seja criado na raiz do projeto, inclusive no PyInstaller)
if getattr(sys, 'frozen', False):
    BASE_DIR = Path(sys._MEIPASS)
else:
    BASE_DIR = Path(".")
# -------------------------


class Settings(BaseSettings):
    # App
    PROJECT_NAME: str = "Lava-Jato - Gestão"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'lavajato.db'}"

    # Sessão (cookie assinado)
    SECRET_KEY: str = "troque-esta-chave-em-producao"
    HTTPS_ONLY: bool = False

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:5173"]

    # Programa de fidelidade
    LOYALTY_WASH_SERVICE_NAME: str = "Lavagem Simples"
    LOYALTY_REWARD_SERVICE_NAME: str = "Polimento de Fidelidade"
    LOYALTY_GOAL: int = Field(10, gt=0)
    # False mantém a fórmula histórica (recompensa nunca disponível)
    LOYALTY_CORRECTED_FORMULA: bool = False

    # Ordens de serviço
    ENFORCE_STATUS_TRANSITIONS: bool = False

    # Senhas iniciais dos perfis (usadas só quando o perfil ainda não tem senha)
    DEFAULT_ADMIN_PASSWORD: str = "comamor"
    DEFAULT_EMPLOYEE_PASSWORD: str = "lavajato"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=True
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
