import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.middleware.sessions import SessionMiddleware
from starlette.responses import RedirectResponse
from starlette import status as status_codes

from lavajato.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("lavajato")

# BANCO DE DADOS
from lavajato.database import engine, Base
from lavajato import database_models  # noqa: F401 (registra as tabelas no Base)
from lavajato.auth_utils import create_default_credentials_if_not_exist
from lavajato.exceptions import LavajatoError
#----------------------------------------------------------
from lavajato.routers import auth, customers, dashboard, expenses, products, services, vehicles, work_orders
# ---------------------------------


# Cria a instância principal do FastAPI
app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION)
Base.metadata.create_all(bind=engine)
create_default_credentials_if_not_exist()

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SECRET_KEY,
    https_only=settings.HTTPS_ONLY
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Erros de domínio -> resposta HTTP (400 / 404 / 409)
@app.exception_handler(LavajatoError)
def handle_domain_error(request: Request, exc: LavajatoError):
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Inclui os roteadores (ordem não importa)
for router in (
    auth.router,
    customers.router,
    vehicles.router,
    products.router,
    services.router,
    work_orders.router,
    expenses.router,
    dashboard.router,
):
    app.include_router(router, prefix=settings.API_PREFIX)


@app.get("/", include_in_schema=False)
def redirect_to_docs():
    return RedirectResponse(url="/docs", status_code=status_codes.HTTP_302_FOUND)


@app.get(f"{settings.API_PREFIX}/health", response_class=PlainTextResponse)
def health():
    return "OK"


if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=8000)
