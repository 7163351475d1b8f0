from fastapi import APIRouter, status, Depends, Path, Body
from sqlalchemy.orm import Session
from bolao.database.db import get_db
from bolao.database import models
from bolao.utils.api_response import success_response
from bolao.repositorios.jogo import RepositorioJogo
from bolao.utils.route_error_handler import RouteErrorHandler

router = APIRouter(route_class=RouteErrorHandler)

# -------------------------- Apostas --------------------------

@router.get("/groups/{grupo_id}/bets", tags=['Jogo'], status_code=status.HTTP_200_OK, response_model=models.ApiResponse)
async def listar_apostas(
    grupo_id: int = Path(..., description="ID do grupo"),
    db: Session = Depends(get_db)
):
    apostas = await RepositorioJogo(db).listar_apostas(grupo_id)
    return success_response(apostas, f'{len(apostas)} apostas encontradas')

@router.post("/groups/{grupo_id}/bets", tags=['Jogo'], status_code=status.HTTP_201_CREATED, response_model=models.ApiResponse)
async def registrar_aposta(
    grupo_id: int = Path(..., description="ID do grupo"),
    aposta_data: models.ApostaRequest = Body(...),
    db: Session = Depends(get_db)
):
    """Registra os números de uma aposta; se já houver resultado, confere na hora"""

    aposta = await RepositorioJogo(db).registrar_aposta(grupo_id, aposta_data)
    return success_response(aposta, 'Aposta registrada com sucesso', status_code=201)

@router.put("/groups/{grupo_id}/bets/{aposta_id}", tags=['Jogo'], status_code=status.HTTP_200_OK, response_model=models.ApiResponse)
async def atualizar_aposta(
    grupo_id: int = Path(..., description="ID do grupo"),
    aposta_id: int = Path(..., description="ID da aposta"),
    aposta_data: models.ApostaRequest = Body(...),
    db: Session = Depends(get_db)
):
    aposta = await RepositorioJogo(db).atualizar_aposta(grupo_id, aposta_id, aposta_data)
    return success_response(aposta, 'Aposta atualizada com sucesso')

@router.delete("/groups/{grupo_id}/bets/{aposta_id}", tags=['Jogo'], status_code=status.HTTP_200_OK, response_model=models.ApiResponse)
async def excluir_aposta(
    grupo_id: int = Path(..., description="ID do grupo"),
    aposta_id: int = Path(..., description="ID da aposta"),
    db: Session = Depends(get_db)
):
    await RepositorioJogo(db).remover_aposta(grupo_id, aposta_id)
    return success_response(None, 'Aposta excluída com sucesso')

# -------------------------- Resultados --------------------------

@router.post("/groups/{grupo_id}/results", tags=['Jogo Resultado'], status_code=status.HTTP_201_CREATED, response_model=models.ApiResponse)
async def registrar_resultado(
    grupo_id: int = Path(..., description="ID do grupo"),
    resultado_data: models.ResultadoRequest = Body(...),
    db: Session = Depends(get_db)
):
    """Registra o resultado do sorteio e confere todas as apostas"""

    resultado = await RepositorioJogo(db).registrar_resultado(grupo_id, resultado_data)
    return success_response(resultado, 'Resultado registrado com sucesso', status_code=201)

@router.get("/groups/{grupo_id}/check", tags=['Jogo Resultado'], status_code=status.HTTP_200_OK, response_model=models.ApiResponse)
async def conferir_resultado(
    grupo_id: int = Path(..., description="ID do grupo"),
    db: Session = Depends(get_db)
):
    """Resultado vigente do grupo com os acertos de cada aposta"""

    conferencia = await RepositorioJogo(db).conferir(grupo_id)
    return success_response(conferencia)
