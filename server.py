from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from contextlib import asynccontextmanager
import uvicorn
import logging
import os
from datetime import datetime

from bolao.utils.config_bolao import ConfigBolao
from bolao.utils.exceptions_bolao import BolaoException
from bolao.utils.api_response import success_response, error_response

# Imports do banco de dados
from bolao.database.db import engine, Base, SessionLocal
from bolao.database import schemas, models

# Imports das rotas
from bolao.routers import (
    route_participante,
    route_grupo,
    route_pagamento,
    route_jogo,
    route_premio
)

# Configuração de logging
logging.basicConfig(
    level=ConfigBolao.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# ===================================================================
# CONFIGURAÇÃO DE TAGS PARA DOCUMENTAÇÃO
# ===================================================================

tags_metadata = [
    {
        "name": "Participante",
        "description": "Cadastro de participantes (nome e telefone)."
    },
    {
        "name": "Grupo",
        "description": "Gerencia os bolões: tipo de loteria, data do sorteio, cotas e chave PIX."
    },
    {
        "name": "Grupo Cotas",
        "description": "Cotas de cada participante no grupo, respeitando o total de cotas do bolão."
    },
    {
        "name": "Pagamento",
        "description": "Controle de pagamento das cotas, comprovantes e QR Code PIX."
    },
    {
        "name": "Jogo",
        "description": "Apostas do grupo validadas pelo formato de cada loteria."
    },
    {
        "name": "Jogo Resultado",
        "description": "Resultado do sorteio e conferência automática dos acertos."
    },
    {
        "name": "Premiação",
        "description": "Status do grupo, taxa de administração, cálculo e distribuição do prêmio."
    },
    {
        "name": "Premiação Liquidação",
        "description": "Repasse do prêmio aos participantes e auditoria da liquidação."
    },
]

# ===================================================================
# CONFIGURAÇÃO DO CICLO DE VIDA DA APLICAÇÃO
# ===================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Gerenciamento do ciclo de vida da aplicação"""
    logger.info("🚀 Iniciando Sistema de Bolões...")

    try:
        Base.metadata.create_all(bind=engine)
        logger.info("✅ Estrutura do banco de dados verificada/criada")
    except Exception as e:
        logger.error(f"❌ Erro ao configurar banco de dados: {e}")
        raise

    logger.info("📚 Documentação disponível em: /docs")

    yield

    logger.info("🛑 Encerrando Sistema de Bolões...")

# ===================================================================
# CRIAÇÃO DA APLICAÇÃO FASTAPI
# ===================================================================

app = FastAPI(
    title="Sistema de Bolões",
    description="""
    ## 🎰 Gestão de bolões de loteria

    Participantes, cotas, pagamentos, apostas, conferência de resultados
    e distribuição do prêmio proporcional às cotas de cada participante.
    """,
    version="1.0.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS - Configurar adequadamente em produção
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Comprovantes enviados
os.makedirs(ConfigBolao.UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=ConfigBolao.UPLOAD_DIR), name="uploads")

# ===================================================================
# ROTAS PRINCIPAIS DO SISTEMA
# ===================================================================

@app.get("/", tags=["Sistema"], summary="Informações do Sistema")
async def root():
    return {
        "sistema": "Sistema de Bolões",
        "versao": "1.0.0",
        "status": "ativo",
        "documentacao": "/docs",
        "timestamp": datetime.now().isoformat()
    }

@app.get("/health", tags=["Sistema"], summary="Verificação de Saúde")
async def health_check():
    """Verifica a conexão com o banco de dados"""
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        db_status = "conectado"
    except Exception as e:
        logger.error(f"Health check falhou: {e}")
        db_status = f"erro: {str(e)}"
    finally:
        db.close()

    return {
        "status": "ok" if db_status == "conectado" else "erro",
        "timestamp": datetime.now().isoformat(),
        "banco_dados": db_status
    }

@app.get("/api/v1/lottery-types", tags=["Sistema"], summary="Tipos de Loteria", response_model=models.ApiResponse)
async def tipos_loteria():
    """Tipos de loteria suportados com quantidade de números e faixa válida"""
    return success_response(ConfigBolao.TIPOS_LOTERIA)

# ===================================================================
# INCLUSÃO DAS ROTAS DOS MÓDULOS
# ===================================================================

app.include_router(route_participante.router, prefix="/api/v1", tags=["Participantes"])
app.include_router(route_grupo.router, prefix="/api/v1", tags=["Grupos"])
app.include_router(route_pagamento.router, prefix="/api/v1", tags=["Pagamentos"])
app.include_router(route_jogo.router, prefix="/api/v1", tags=["Jogos"])
app.include_router(route_premio.router, prefix="/api/v1", tags=["Premiação"])

# ===================================================================
# CONFIGURAÇÃO DE EXCEÇÕES GLOBAIS
# ===================================================================

@app.exception_handler(BolaoException)
async def bolao_exception_handler(request: Request, exc: BolaoException):
    """Exceções de negócio levantadas fora das rotas com RouteErrorHandler"""
    resposta = error_response(message=str(exc), status_code=exc.status_code)
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(resposta))

@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    resposta = error_response(message=str(exc), status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=jsonable_encoder(resposta))

# ===================================================================
# INICIALIZAÇÃO DO SERVIDOR
# ===================================================================

if __name__ == "__main__":
    print("🎰 Sistema de Bolões")
    print("📚 Documentação: http://localhost:8000/docs")

    uvicorn.run(
        "server:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
        access_log=True
    )
