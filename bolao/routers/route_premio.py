from fastapi import APIRouter, status, Depends, Path, Body
from sqlalchemy.orm import Session
from bolao.database.db import get_db
from bolao.database import models
from bolao.utils.api_response import success_response
from bolao.repositorios.premio import RepositorioPremio
from bolao.utils.route_error_handler import RouteErrorHandler

router = APIRouter(route_class=RouteErrorHandler)

# -------------------------- Status do Grupo --------------------------

@router.patch("/groups/{grupo_id}/status", tags=['Premiação'], status_code=status.HTTP_200_OK, response_model=models.ApiResponse)
async def atualizar_status(
    grupo_id: int = Path(..., description="ID do grupo"),
    dados: models.AtualizarStatusRequest = Body(...),
    db: Session = Depends(get_db)
):
    """
    Avança o status do grupo: open -> closed -> checked -> finalized.

    'checked' exige resultado cadastrado e 'finalized' exige a distribuição do prêmio.
    """
    resultado = await RepositorioPremio(db).atualizar_status(grupo_id, dados.status)
    return success_response(resultado, 'Status atualizado com sucesso')

# -------------------------- Taxa de Administração --------------------------

@router.patch("/groups/{grupo_id}/admin-fee", tags=['Premiação'], status_code=status.HTTP_200_OK, response_model=models.ApiResponse)
async def configurar_taxa(
    grupo_id: int = Path(..., description="ID do grupo"),
    dados: models.TaxaAdministracaoRequest = Body(...),
    db: Session = Depends(get_db)
):
    taxa = await RepositorioPremio(db).configurar_taxa(grupo_id, dados.admin_fee_type, dados.admin_fee_value)
    return success_response(taxa, 'Taxa de administração configurada')

# -------------------------- Cálculo e Distribuição --------------------------

@router.post("/groups/{grupo_id}/calculate-prize", tags=['Premiação'], status_code=status.HTTP_200_OK, response_model=models.ApiResponse)
async def calcular_premio(
    grupo_id: int = Path(..., description="ID do grupo"),
    dados: models.CalcularPremioRequest = Body(...),
    db: Session = Depends(get_db)
):
    """Calcula taxa, prêmio líquido e a parte de cada participante; grupo passa a 'checked'"""

    calculo = await RepositorioPremio(db).calcular_premio(grupo_id, dados.prize_amount)
    return success_response(models.ResultadoCalculoPremio(**calculo).model_dump(), 'Prêmio calculado com sucesso')

@router.get("/groups/{grupo_id}/distribution", tags=['Premiação'], status_code=status.HTTP_200_OK, response_model=models.ApiResponse)
async def consultar_distribuicao(
    grupo_id: int = Path(..., description="ID do grupo"),
    db: Session = Depends(get_db)
):
    distribuicao = await RepositorioPremio(db).get_distribuicao(grupo_id)
    return success_response(
        [models.DistribuicaoPremio(**d).model_dump() for d in distribuicao],
        f'{len(distribuicao)} participantes na distribuição'
    )

# -------------------------- Liquidação --------------------------

@router.patch("/groups/{grupo_id}/distribution/{participante_id}/payout", tags=['Premiação Liquidação'], status_code=status.HTTP_200_OK, response_model=models.ApiResponse)
async def registrar_repasse(
    grupo_id: int = Path(..., description="ID do grupo"),
    participante_id: int = Path(..., description="ID do participante"),
    dados: models.PagamentoPremioRequest = Body(...),
    db: Session = Depends(get_db)
):
    """Marca ou estorna o repasse do prêmio ao participante"""

    distribuicao = await RepositorioPremio(db).registrar_pagamento_premio(grupo_id, participante_id, dados.paid_out)
    return success_response(distribuicao, 'Repasse atualizado com sucesso')

@router.get("/groups/{grupo_id}/liquidation", tags=['Premiação Liquidação'], status_code=status.HTTP_200_OK, response_model=models.ApiResponse)
async def resumo_liquidacao(
    grupo_id: int = Path(..., description="ID do grupo"),
    db: Session = Depends(get_db)
):
    resumo = await RepositorioPremio(db).get_resumo_liquidacao(grupo_id)
    return success_response(models.ResumoLiquidacao(**resumo).model_dump())

@router.get("/groups/{grupo_id}/audit", tags=['Premiação Liquidação'], status_code=status.HTTP_200_OK, response_model=models.ApiResponse)
async def auditoria_liquidacao(
    grupo_id: int = Path(..., description="ID do grupo"),
    db: Session = Depends(get_db)
):
    auditoria = await RepositorioPremio(db).get_auditoria(grupo_id)
    return success_response(auditoria, f'{len(auditoria)} registros de auditoria')

# -------------------------- Relatório --------------------------

@router.get("/groups/{grupo_id}/whatsapp-report", tags=['Premiação'], status_code=status.HTTP_200_OK, response_model=models.ApiResponse)
async def relatorio_whatsapp(
    grupo_id: int = Path(..., description="ID do grupo"),
    db: Session = Depends(get_db)
):
    """Texto com resultado, acertos e premiação pronto para envio no WhatsApp"""

    relatorio = await RepositorioPremio(db).gerar_relatorio_whatsapp(grupo_id)
    return success_response(relatorio)
