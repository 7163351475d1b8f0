from fastapi import APIRouter, status, Depends, Path, Body
from sqlalchemy.orm import Session
from bolao.database.db import get_db
from bolao.database import models
from bolao.utils.api_response import success_response
from bolao.repositorios.participante import RepositorioParticipante
from bolao.utils.route_error_handler import RouteErrorHandler

router = APIRouter(route_class=RouteErrorHandler)

@router.get("/participants", tags=['Participante'], status_code=status.HTTP_200_OK, response_model=models.ApiResponse)
async def listar_participantes(db: Session = Depends(get_db)):
    """Lista todos os participantes ordenados por nome"""

    participantes = await RepositorioParticipante(db).get_all()
    return success_response([models.Participante.model_validate(p).model_dump() for p in participantes], f'{len(participantes)} participantes encontrados')

@router.get("/participants/{participante_id}", tags=['Participante'], status_code=status.HTTP_200_OK, response_model=models.ApiResponse)
async def consultar_participante(
    participante_id: int = Path(..., description="ID do participante"),
    db: Session = Depends(get_db)
):
    participante = await RepositorioParticipante(db).obter(participante_id)
    return success_response(models.Participante.model_validate(participante).model_dump())

@router.post("/participants", tags=['Participante'], status_code=status.HTTP_201_CREATED, response_model=models.ApiResponse)
async def criar_participante(
    participante_data: models.ParticipantePOST,
    db: Session = Depends(get_db)
):
    """Cadastra um participante (telefone único)"""

    participante = await RepositorioParticipante(db).post(participante_data)
    return success_response(participante, 'Participante cadastrado com sucesso', status_code=201)

@router.put("/participants/{participante_id}", tags=['Participante'], status_code=status.HTTP_200_OK, response_model=models.ApiResponse)
async def atualizar_participante(
    participante_id: int = Path(..., description="ID do participante"),
    participante_data: models.ParticipantePUT = Body(...),
    db: Session = Depends(get_db)
):
    participante = await RepositorioParticipante(db).put(participante_id, participante_data)
    return success_response(participante, 'Participante atualizado com sucesso')

@router.delete("/participants/{participante_id}", tags=['Participante'], status_code=status.HTTP_200_OK, response_model=models.ApiResponse)
async def excluir_participante(
    participante_id: int = Path(..., description="ID do participante"),
    db: Session = Depends(get_db)
):
    """Remove o participante de todos os grupos e do cadastro"""

    await RepositorioParticipante(db).delete(participante_id)
    return success_response(None, 'Participante excluído com sucesso')
