from sqlalchemy import select, delete, desc, func
from sqlalchemy.orm import Session
from bolao.database import schemas
from bolao.utils.error_handler import handle_error
from bolao.utils.utils_bolao import UtilsBolao
from bolao.utils.config_bolao import ConfigBolao
from bolao.utils.api_response import sqlalchemy_to_dict
from bolao.utils.exceptions_bolao import NaoEncontradoException, TransicaoInvalidaException, StatusInvalidoException
from bolao.repositorios.grupo import RepositorioGrupo
from bolao.repositorios.jogo import RepositorioJogo
from datetime import datetime
from typing import List, Optional, Dict, Any
import logging
import pytz

AMSP = pytz.timezone(ConfigBolao.TIMEZONE)
logger = logging.getLogger(__name__)

class RepositorioPremio:
    """
    Repositório da premiação: ciclo de status do grupo, taxa de administração,
    cálculo e distribuição do prêmio proporcional às cotas e liquidação.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo_grupo = RepositorioGrupo(db)

    # ---------------------- Status do Grupo ----------------------

    async def possui_resultado(self, grupo_id: int) -> bool:
        stmt = select(func.count(schemas.ResultadosSorteio.id)).where(
            schemas.ResultadosSorteio.group_id == grupo_id
        )
        return (self.db.execute(stmt).scalar() or 0) > 0

    async def possui_distribuicao(self, grupo_id: int) -> bool:
        stmt = select(func.count(schemas.DistribuicoesPremio.id)).where(
            schemas.DistribuicoesPremio.group_id == grupo_id
        )
        return (self.db.execute(stmt).scalar() or 0) > 0

    async def atualizar_status(self, grupo_id: int, novo_status: str) -> Dict[str, Any]:
        """
        Avança o status do grupo (open -> closed -> checked -> finalized).

        Conferido exige resultado cadastrado; finalizado exige distribuição
        calculada. Apenas o campo status é alterado.
        """
        if novo_status not in ConfigBolao.STATUS_GRUPO:
            raise StatusInvalidoException(novo_status)

        grupo = await self.repo_grupo.obter(grupo_id)

        UtilsBolao.validar_transicao(
            grupo.status,
            novo_status,
            possui_resultado=await self.possui_resultado(grupo_id),
            possui_distribuicao=await self.possui_distribuicao(grupo_id)
        )

        try:
            status_anterior = grupo.status
            grupo.status = novo_status
            self.db.commit()

            logger.info(f"Grupo {grupo_id}: status {status_anterior} -> {novo_status}")
            return {'status': novo_status}
        except Exception as error:
            self.db.rollback()
            handle_error(error, self.atualizar_status)

    # ---------------------- Taxa de Administração ----------------------

    async def configurar_taxa(self, grupo_id: int, tipo_taxa: Optional[str], valor_taxa: Optional[float]) -> Dict[str, Any]:
        """Atualiza a taxa sem recalcular distribuições já existentes"""
        UtilsBolao.validar_taxa(tipo_taxa, valor_taxa)
        grupo = await self.repo_grupo.obter(grupo_id)

        try:
            grupo.admin_fee_type = tipo_taxa
            grupo.admin_fee_value = valor_taxa
            self.db.commit()

            logger.info(f"Grupo {grupo_id}: taxa de administração {tipo_taxa}={valor_taxa}")
            return {'admin_fee_type': tipo_taxa, 'admin_fee_value': valor_taxa}
        except Exception as error:
            self.db.rollback()
            handle_error(error, self.configurar_taxa)

    # ---------------------- Cálculo do Prêmio ----------------------

    async def get_contribuicoes(self, grupo_id: int) -> List[Dict[str, Any]]:
        """Valor individual de cada participante do grupo, com nome e telefone"""
        stmt = select(
            schemas.GrupoParticipantes.participant_id,
            schemas.GrupoParticipantes.individual_value,
            schemas.Participantes.name,
            schemas.Participantes.phone
        ).join(
            schemas.Participantes,
            schemas.Participantes.id == schemas.GrupoParticipantes.participant_id
        ).where(
            schemas.GrupoParticipantes.group_id == grupo_id
        ).order_by(schemas.GrupoParticipantes.id)

        return [dict(row._mapping) for row in self.db.execute(stmt).all()]

    async def _registrar_auditoria(self, grupo_id: int, acao: str, participante_id: Optional[int] = None,
                                   valor: Optional[float] = None, descricao: Optional[str] = None) -> None:
        self.db.add(schemas.AuditoriaLiquidacao(
            group_id=grupo_id,
            action=acao,
            participant_id=participante_id,
            amount=valor,
            description=descricao
        ))

    async def calcular_premio(self, grupo_id: int, valor_premio: Optional[float]) -> Dict[str, Any]:
        """
        Calcula e grava a distribuição do prêmio do grupo.

        A distribuição anterior é apagada e substituída, e o grupo recebe o
        valor do prêmio e o status 'checked', tudo em uma única transação:
        qualquer falha desfaz a operação inteira.

        Raises:
            ValorPremioInvalidoException: prêmio ausente ou <= 0
            NaoEncontradoException: grupo inexistente
            TransicaoInvalidaException: grupo já finalizado
            SemParticipantesException: nenhuma contribuição (ou total zero)
        """
        UtilsBolao.validar_valor_premio(valor_premio)
        grupo = await self.repo_grupo.obter(grupo_id)

        if grupo.status == schemas.StatusGrupo.FINALIZED.value:
            raise TransicaoInvalidaException(grupo.status, schemas.StatusGrupo.CHECKED.value)

        contribuicoes = await self.get_contribuicoes(grupo_id)
        calculo = UtilsBolao.calcular_distribuicao(
            valor_premio, grupo.admin_fee_type, grupo.admin_fee_value, contribuicoes
        )

        try:
            self.db.execute(
                delete(schemas.DistribuicoesPremio).where(
                    schemas.DistribuicoesPremio.group_id == grupo_id
                )
            )

            novas = []
            for item in calculo['distributions']:
                db_distribuicao = schemas.DistribuicoesPremio(
                    group_id=grupo_id,
                    participant_id=item['participant_id'],
                    quota_fraction=item['quota_fraction'],
                    prize_share=item['prize_share'],
                    paid_out=False
                )
                self.db.add(db_distribuicao)
                novas.append((db_distribuicao, item))

            grupo.prize_amount = valor_premio
            grupo.status = schemas.StatusGrupo.CHECKED.value

            await self._registrar_auditoria(
                grupo_id,
                ConfigBolao.ACAO_PREMIO_CALCULADO,
                valor=calculo['net_prize'],
                descricao=(
                    f"Prêmio bruto R$ {valor_premio:.2f}, taxa R$ {calculo['admin_fee']:.2f}, "
                    f"{len(novas)} participantes"
                )
            )

            self.db.commit()
        except Exception as error:
            self.db.rollback()
            handle_error(error, self.calcular_premio)

        logger.info(
            f"Grupo {grupo_id}: prêmio {valor_premio} calculado (taxa={calculo['admin_fee']}, "
            f"líquido={calculo['net_prize']}, participantes={len(novas)})"
        )

        distribuicoes = []
        for db_distribuicao, item in novas:
            distribuicoes.append({
                'id': db_distribuicao.id,
                'group_id': grupo_id,
                'participant_id': item['participant_id'],
                'quota_fraction': item['quota_fraction'],
                'prize_share': item['prize_share'],
                'paid_out': False,
                'payout_date': None,
                'name': item['name'],
                'phone': item['phone'],
            })

        return {
            'prize_amount': calculo['prize_amount'],
            'admin_fee': calculo['admin_fee'],
            'net_prize': calculo['net_prize'],
            'distributions': distribuicoes
        }

    # ---------------------- Distribuição e Liquidação ----------------------

    async def get_distribuicao(self, grupo_id: int) -> List[Dict[str, Any]]:
        """Distribuição com nome e telefone, maior parte primeiro"""
        await self.repo_grupo.obter(grupo_id)
        try:
            stmt = select(
                schemas.DistribuicoesPremio,
                schemas.Participantes.name,
                schemas.Participantes.phone
            ).join(
                schemas.Participantes,
                schemas.Participantes.id == schemas.DistribuicoesPremio.participant_id
            ).where(
                schemas.DistribuicoesPremio.group_id == grupo_id
            ).order_by(desc(schemas.DistribuicoesPremio.prize_share))

            distribuicoes = []
            for row in self.db.execute(stmt).all():
                distribuicao = sqlalchemy_to_dict(row[0])
                distribuicao['paid_out'] = bool(distribuicao['paid_out'])
                distribuicao['name'] = row.name
                distribuicao['phone'] = row.phone
                distribuicoes.append(distribuicao)
            return distribuicoes
        except Exception as error:
            handle_error(error, self.get_distribuicao)

    async def registrar_pagamento_premio(self, grupo_id: int, participante_id: int, pago: bool) -> schemas.DistribuicoesPremio:
        """Marca (ou estorna) o repasse da parte do prêmio ao participante"""
        await self.repo_grupo.obter(grupo_id)
        stmt = select(schemas.DistribuicoesPremio).where(
            schemas.DistribuicoesPremio.group_id == grupo_id,
            schemas.DistribuicoesPremio.participant_id == participante_id
        )
        distribuicao = self.db.execute(stmt).scalars().first()
        if not distribuicao:
            raise NaoEncontradoException("Distribuição do participante")

        try:
            distribuicao.paid_out = pago
            distribuicao.payout_date = datetime.now(AMSP) if pago else None

            await self._registrar_auditoria(
                grupo_id,
                ConfigBolao.ACAO_PAGAMENTO_PREMIO if pago else ConfigBolao.ACAO_PAGAMENTO_ESTORNADO,
                participante_id=participante_id,
                valor=distribuicao.prize_share,
                descricao="Prêmio repassado ao participante" if pago else "Repasse do prêmio estornado"
            )

            self.db.commit()
            self.db.refresh(distribuicao)

            logger.info(f"Grupo {grupo_id}: repasse participante={participante_id} pago={pago}")
            return distribuicao
        except Exception as error:
            self.db.rollback()
            handle_error(error, self.registrar_pagamento_premio)

    async def get_resumo_liquidacao(self, grupo_id: int) -> Dict[str, Any]:
        """Totais arrecadados, prêmio líquido e quanto já foi repassado"""
        grupo = await self.repo_grupo.obter(grupo_id)
        try:
            cotas = self.db.execute(
                select(schemas.GrupoParticipantes).where(schemas.GrupoParticipantes.group_id == grupo_id)
            ).scalars().all()
            distribuicoes = self.db.execute(
                select(schemas.DistribuicoesPremio).where(schemas.DistribuicoesPremio.group_id == grupo_id)
            ).scalars().all()

            total_arrecadado = sum(c.individual_value for c in cotas if c.paid)
            premio_liquido = 0.0
            if grupo.prize_amount and grupo.prize_amount > 0:
                premio_liquido = grupo.prize_amount - UtilsBolao.calcular_taxa_administracao(
                    grupo.prize_amount, grupo.admin_fee_type, grupo.admin_fee_value
                )
            total_repassado = sum(d.prize_share for d in distribuicoes if d.paid_out)

            return {
                'total_collected': total_arrecadado,
                'total_prize': premio_liquido,
                'total_distributed': total_repassado,
                'remaining_balance': premio_liquido - total_repassado,
                'participants_paid': sum(1 for d in distribuicoes if d.paid_out),
                'total_participants': len(distribuicoes)
            }
        except Exception as error:
            handle_error(error, self.get_resumo_liquidacao)

    async def get_auditoria(self, grupo_id: int) -> List[schemas.AuditoriaLiquidacao]:
        """Trilha de auditoria da liquidação, mais recente primeiro"""
        await self.repo_grupo.obter(grupo_id)
        stmt = select(schemas.AuditoriaLiquidacao).where(
            schemas.AuditoriaLiquidacao.group_id == grupo_id
        ).order_by(desc(schemas.AuditoriaLiquidacao.id))
        return self.db.execute(stmt).scalars().all()

    # ---------------------- Relatório ----------------------

    async def gerar_relatorio_whatsapp(self, grupo_id: int) -> Dict[str, str]:
        grupo = await self.repo_grupo.obter(grupo_id)
        repo_jogo = RepositorioJogo(self.db)

        resultado = await repo_jogo.get_resultado_atual(grupo_id)
        if not resultado:
            raise NaoEncontradoException("Resultado")

        apostas = await repo_jogo.get_apostas(grupo_id)
        relatorio = UtilsBolao.gerar_relatorio_whatsapp(
            sqlalchemy_to_dict(grupo),
            resultado.get_numeros(),
            resultado.get_acertos(),
            # Numeração das apostas segue a ordem de cadastro
            sorted((a.to_dict() for a in apostas), key=lambda a: a['id']),
            await self.get_distribuicao(grupo_id)
        )
        return {'report': relatorio}
