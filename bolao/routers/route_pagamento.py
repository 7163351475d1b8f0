from fastapi import APIRouter, status, Depends, Path, Body, UploadFile, File
from sqlalchemy.orm import Session
from bolao.database.db import get_db
from bolao.database import models
from bolao.utils.api_response import success_response
from bolao.repositorios.pagamento import RepositorioPagamento
from bolao.utils.route_error_handler import RouteErrorHandler
from bolao.utils.config_bolao import ConfigBolao

router = APIRouter(route_class=RouteErrorHandler)

@router.get("/groups/{grupo_id}/payments", tags=['Pagamento'], status_code=status.HTTP_200_OK, response_model=models.ApiResponse)
async def listar_pagamentos(
    grupo_id: int = Path(..., description="ID do grupo"),
    db: Session = Depends(get_db)
):
    """Situação de pagamento das cotas do grupo"""

    pagamentos = await RepositorioPagamento(db).listar_por_grupo(grupo_id)
    return success_response(pagamentos, f'{len(pagamentos)} cotas encontradas')

@router.post("/payments/mark-paid", tags=['Pagamento'], status_code=status.HTTP_200_OK, response_model=models.ApiResponse)
async def marcar_pago(
    dados: models.MarcarPagamentoRequest,
    db: Session = Depends(get_db)
):
    cota = await RepositorioPagamento(db).marcar_pago(dados)
    return success_response(cota, 'Status de pagamento atualizado com sucesso')

@router.post("/payments/{grupo_id}/{participante_id}/approve", tags=['Pagamento'], status_code=status.HTTP_200_OK, response_model=models.ApiResponse)
async def aprovar_pagamento(
    grupo_id: int = Path(..., description="ID do grupo"),
    participante_id: int = Path(..., description="ID do participante"),
    db: Session = Depends(get_db)
):
    cota = await RepositorioPagamento(db).aprovar(grupo_id, participante_id)
    return success_response(cota, 'Pagamento aprovado')

@router.post("/payments/{grupo_id}/{participante_id}/reject", tags=['Pagamento'], status_code=status.HTTP_200_OK, response_model=models.ApiResponse)
async def rejeitar_pagamento(
    grupo_id: int = Path(..., description="ID do grupo"),
    participante_id: int = Path(..., description="ID do participante"),
    dados: models.RejeitarPagamentoRequest = Body(...),
    db: Session = Depends(get_db)
):
    cota = await RepositorioPagamento(db).rejeitar(grupo_id, participante_id, dados.reason)
    return success_response(cota, 'Pagamento rejeitado')

@router.post("/payments/{grupo_id}/{participante_id}/receipt", tags=['Pagamento'], status_code=status.HTTP_200_OK, response_model=models.ApiResponse)
async def enviar_comprovante(
    grupo_id: int = Path(..., description="ID do grupo"),
    participante_id: int = Path(..., description="ID do participante"),
    receipt: UploadFile = File(..., description="Comprovante (JPEG, PNG ou PDF até 5MB)"),
    db: Session = Depends(get_db)
):
    """Recebe o comprovante de pagamento e marca a cota como paga"""

    conteudo = await receipt.read(ConfigBolao.TAMANHO_MAX_COMPROVANTE + 1)
    cota = await RepositorioPagamento(db).salvar_comprovante(grupo_id, participante_id, receipt.filename, conteudo)
    return success_response({'receipt_path': cota.receipt_path}, 'Comprovante enviado com sucesso')

@router.get("/groups/{grupo_id}/qrcode", tags=['Pagamento'], status_code=status.HTTP_200_OK, response_model=models.ApiResponse)
async def gerar_qrcode(
    grupo_id: int = Path(..., description="ID do grupo"),
    db: Session = Depends(get_db)
):
    """QR Code (data URL PNG) da chave PIX do grupo"""

    dados = await RepositorioPagamento(db).gerar_qrcode(grupo_id)
    return success_response(dados)
