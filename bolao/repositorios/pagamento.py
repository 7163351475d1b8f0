from sqlalchemy.orm import Session
from bolao.database import models, schemas
from bolao.utils.error_handler import handle_error
from bolao.utils.config_bolao import ConfigBolao
from bolao.utils.exceptions_bolao import ArquivoInvalidoException
from bolao.repositorios.grupo import RepositorioGrupo
from bolao.providers import qrcode_provider
from datetime import datetime
from typing import List, Dict, Any
import logging, os, uuid
import pytz

AMSP = pytz.timezone(ConfigBolao.TIMEZONE)
logger = logging.getLogger(__name__)

class RepositorioPagamento:
    """Repositório para o controle de pagamento das cotas"""

    def __init__(self, db: Session):
        self.db = db
        self.repo_grupo = RepositorioGrupo(db)

    async def listar_por_grupo(self, grupo_id: int) -> List[Dict[str, Any]]:
        """Situação de pagamento de cada participante do grupo"""
        await self.repo_grupo.obter(grupo_id)
        return await self.repo_grupo.listar_participantes(grupo_id)

    async def marcar_pago(self, dados: models.MarcarPagamentoRequest) -> schemas.GrupoParticipantes:
        """Marca/desmarca a cota como paga"""
        try:
            cota = await self.repo_grupo.obter_cota(dados.group_id, dados.participant_id)

            cota.paid = dados.paid
            if dados.paid:
                cota.payment_date = datetime.now(AMSP)
                cota.payment_status = schemas.StatusPagamento.APPROVED.value
                cota.rejection_reason = None
                cota.rejection_date = None
            else:
                cota.payment_date = None
                cota.payment_status = schemas.StatusPagamento.PENDING.value

            self.db.commit()
            self.db.refresh(cota)

            logger.info(f"Pagamento grupo={dados.group_id} participante={dados.participant_id} pago={dados.paid}")
            return cota
        except Exception as error:
            self.db.rollback()
            handle_error(error, self.marcar_pago)

    async def aprovar(self, grupo_id: int, participante_id: int) -> schemas.GrupoParticipantes:
        """Aprova o pagamento (normalmente após conferência do comprovante)"""
        return await self.marcar_pago(models.MarcarPagamentoRequest(
            group_id=grupo_id, participant_id=participante_id, paid=True
        ))

    async def rejeitar(self, grupo_id: int, participante_id: int, motivo: str = None) -> schemas.GrupoParticipantes:
        """Rejeita o pagamento registrando motivo e data"""
        try:
            cota = await self.repo_grupo.obter_cota(grupo_id, participante_id)

            cota.paid = False
            cota.payment_date = None
            cota.payment_status = schemas.StatusPagamento.REJECTED.value
            cota.rejection_reason = motivo
            cota.rejection_date = datetime.now(AMSP)

            self.db.commit()
            self.db.refresh(cota)

            logger.info(f"Pagamento rejeitado grupo={grupo_id} participante={participante_id}")
            return cota
        except Exception as error:
            self.db.rollback()
            handle_error(error, self.rejeitar)

    async def salvar_comprovante(self, grupo_id: int, participante_id: int,
                                 nome_arquivo: str, conteudo: bytes) -> schemas.GrupoParticipantes:
        """
        Grava o comprovante no diretório de uploads e marca a cota como paga.

        Aceita apenas JPEG, PNG e PDF de até 5MB.
        """
        extensao = os.path.splitext(nome_arquivo or "")[1].lower()
        if extensao not in ConfigBolao.EXTENSOES_COMPROVANTE:
            raise ArquivoInvalidoException("Apenas imagens (JPEG, PNG) e PDF são permitidos")
        if len(conteudo) > ConfigBolao.TAMANHO_MAX_COMPROVANTE:
            raise ArquivoInvalidoException("Arquivo excede o limite de 5MB")
        if not conteudo:
            raise ArquivoInvalidoException("Nenhum arquivo enviado")

        caminho = None
        try:
            cota = await self.repo_grupo.obter_cota(grupo_id, participante_id)

            os.makedirs(ConfigBolao.UPLOAD_DIR, exist_ok=True)
            nome_destino = f"receipt-{uuid.uuid4().hex}{extensao}"
            caminho = os.path.join(ConfigBolao.UPLOAD_DIR, nome_destino)
            with open(caminho, "wb") as destino:
                destino.write(conteudo)

            # Novo comprovante volta para análise
            cota.receipt_path = nome_destino
            cota.paid = True
            cota.payment_date = datetime.now(AMSP)
            cota.payment_status = schemas.StatusPagamento.PENDING.value
            cota.rejection_reason = None
            cota.rejection_date = None

            self.db.commit()
            self.db.refresh(cota)

            logger.info(f"Comprovante recebido grupo={grupo_id} participante={participante_id}")
            return cota
        except Exception as error:
            self.db.rollback()
            if caminho and os.path.exists(caminho):
                os.remove(caminho)
            handle_error(error, self.salvar_comprovante)

    async def gerar_qrcode(self, grupo_id: int) -> Dict[str, Any]:
        """QR Code da chave PIX do grupo"""
        grupo = await self.repo_grupo.obter(grupo_id)
        try:
            return {
                'qrcode': qrcode_provider.gerar_qrcode_data_url(grupo.pix_key),
                'pix_key': grupo.pix_key,
                'amount': grupo.quota_value
            }
        except Exception as error:
            handle_error(error, self.gerar_qrcode)
