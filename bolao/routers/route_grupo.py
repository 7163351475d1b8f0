from fastapi import APIRouter, status, Depends, Path, Body
from sqlalchemy.orm import Session
from bolao.database.db import get_db
from bolao.database import models
from bolao.utils.api_response import success_response
from bolao.repositorios.grupo import RepositorioGrupo
from bolao.utils.route_error_handler import RouteErrorHandler

router = APIRouter(route_class=RouteErrorHandler)

# -------------------------- Operações Básicas CRUD --------------------------

@router.get("/groups", tags=['Grupo'], status_code=status.HTTP_200_OK, response_model=models.ApiResponse)
async def listar_grupos(db: Session = Depends(get_db)):
    """Lista os grupos com total de participantes e pagamentos, sorteio mais recente primeiro"""

    grupos = await RepositorioGrupo(db).get_all()
    return success_response(grupos, f'{len(grupos)} grupos encontrados')

@router.get("/groups/{grupo_id}", tags=['Grupo'], status_code=status.HTTP_200_OK, response_model=models.ApiResponse)
async def consultar_grupo(
    grupo_id: int = Path(..., description="ID do grupo"),
    db: Session = Depends(get_db)
):
    """Consulta um grupo com seus participantes"""

    grupo = await RepositorioGrupo(db).get_detalhes(grupo_id)
    return success_response(grupo)

@router.post("/groups", tags=['Grupo'], status_code=status.HTTP_201_CREATED, response_model=models.ApiResponse)
async def criar_grupo(
    grupo_data: models.GrupoPOST,
    db: Session = Depends(get_db)
):
    grupo = await RepositorioGrupo(db).post(grupo_data)
    return success_response(models.Grupo.model_validate(grupo).model_dump(), 'Grupo criado com sucesso', status_code=201)

@router.put("/groups/{grupo_id}", tags=['Grupo'], status_code=status.HTTP_200_OK, response_model=models.ApiResponse)
async def atualizar_grupo(
    grupo_id: int = Path(..., description="ID do grupo"),
    grupo_data: models.GrupoPUT = Body(...),
    db: Session = Depends(get_db)
):
    """Atualiza o grupo (total de cotas não pode ficar abaixo do já alocado)"""

    grupo = await RepositorioGrupo(db).put(grupo_id, grupo_data)
    return success_response(models.Grupo.model_validate(grupo).model_dump(), 'Grupo atualizado com sucesso')

@router.delete("/groups/{grupo_id}", tags=['Grupo'], status_code=status.HTTP_200_OK, response_model=models.ApiResponse)
async def excluir_grupo(
    grupo_id: int = Path(..., description="ID do grupo"),
    db: Session = Depends(get_db)
):
    await RepositorioGrupo(db).delete(grupo_id)
    return success_response(None, 'Grupo excluído com sucesso')

# -------------------------- Cotas dos Participantes --------------------------

@router.post("/groups/{grupo_id}/participants", tags=['Grupo Cotas'], status_code=status.HTTP_201_CREATED, response_model=models.ApiResponse)
async def adicionar_participante(
    grupo_id: int = Path(..., description="ID do grupo"),
    cota_data: models.CotaPOST = Body(...),
    db: Session = Depends(get_db)
):
    """Inclui participante no grupo calculando o valor individual da cota"""

    cota = await RepositorioGrupo(db).adicionar_participante(grupo_id, cota_data)
    return success_response(cota, 'Participante adicionado ao grupo', status_code=201)

@router.put("/groups/{grupo_id}/participants/{participante_id}", tags=['Grupo Cotas'], status_code=status.HTTP_200_OK, response_model=models.ApiResponse)
async def atualizar_cota(
    grupo_id: int = Path(..., description="ID do grupo"),
    participante_id: int = Path(..., description="ID do participante"),
    cota_data: models.CotaPUT = Body(...),
    db: Session = Depends(get_db)
):
    cota = await RepositorioGrupo(db).atualizar_participante(grupo_id, participante_id, cota_data)
    return success_response(cota, 'Cota atualizada com sucesso')

@router.delete("/groups/{grupo_id}/participants/{participante_id}", tags=['Grupo Cotas'], status_code=status.HTTP_200_OK, response_model=models.ApiResponse)
async def remover_participante(
    grupo_id: int = Path(..., description="ID do grupo"),
    participante_id: int = Path(..., description="ID do participante"),
    db: Session = Depends(get_db)
):
    await RepositorioGrupo(db).remover_participante(grupo_id, participante_id)
    return success_response(None, 'Participante removido do grupo')
