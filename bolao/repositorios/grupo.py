from sqlalchemy import select, func, case, desc
from sqlalchemy.orm import Session
from bolao.database import models, schemas
from bolao.utils.error_handler import handle_error
from bolao.utils.utils_bolao import UtilsBolao
from bolao.utils.api_response import sqlalchemy_to_dict
from bolao.utils.exceptions_bolao import NaoEncontradoException, ConflitoException, CotasExcedidasException
from bolao.repositorios.participante import RepositorioParticipante
from typing import List, Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

class RepositorioGrupo:
    """Repositório para grupos (bolões) e o livro de cotas de cada participante"""

    def __init__(self, db: Session):
        self.db = db

    # ---------------------- Operações Básicas ----------------------

    async def get_all(self) -> List[Dict[str, Any]]:
        """Lista os grupos com quantidade de participantes e de pagamentos"""
        try:
            cota = schemas.GrupoParticipantes
            stmt = select(
                schemas.Grupos,
                func.count(func.distinct(cota.participant_id)).label("participant_count"),
                func.coalesce(func.sum(case((cota.paid == True, 1), else_=0)), 0).label("paid_count")
            ).outerjoin(
                cota, cota.group_id == schemas.Grupos.id
            ).group_by(
                schemas.Grupos.id
            ).order_by(
                desc(schemas.Grupos.draw_date)
            )

            grupos = []
            for row in self.db.execute(stmt).all():
                grupo = sqlalchemy_to_dict(row[0])
                grupo['participant_count'] = row.participant_count
                grupo['paid_count'] = row.paid_count
                grupos.append(grupo)
            return grupos
        except Exception as error:
            handle_error(error, self.get_all)

    async def get_by_id(self, grupo_id: int) -> Optional[schemas.Grupos]:
        try:
            return self.db.get(schemas.Grupos, grupo_id)
        except Exception as error:
            handle_error(error, self.get_by_id)

    async def obter(self, grupo_id: int) -> schemas.Grupos:
        """Recupera o grupo ou lança NaoEncontradoException"""
        grupo = await self.get_by_id(grupo_id)
        if not grupo:
            raise NaoEncontradoException("Grupo")
        return grupo

    async def get_detalhes(self, grupo_id: int) -> Dict[str, Any]:
        """Grupo com a lista de participantes e suas cotas"""
        grupo = await self.obter(grupo_id)
        detalhes = sqlalchemy_to_dict(grupo)
        detalhes['participants'] = await self.listar_participantes(grupo_id)
        return detalhes

    async def listar_participantes(self, grupo_id: int) -> List[Dict[str, Any]]:
        """Cotas do grupo com nome e telefone, ordenadas por nome"""
        try:
            stmt = select(
                schemas.GrupoParticipantes,
                schemas.Participantes.name,
                schemas.Participantes.phone
            ).join(
                schemas.Participantes,
                schemas.Participantes.id == schemas.GrupoParticipantes.participant_id
            ).where(
                schemas.GrupoParticipantes.group_id == grupo_id
            ).order_by(schemas.Participantes.name.asc())

            participantes = []
            for row in self.db.execute(stmt).all():
                cota = sqlalchemy_to_dict(row[0])
                cota['paid'] = bool(cota['paid'])
                cota['name'] = row.name
                cota['phone'] = row.phone
                participantes.append(cota)
            return participantes
        except Exception as error:
            handle_error(error, self.listar_participantes)

    async def post(self, grupo_data: models.GrupoPOST) -> schemas.Grupos:
        """Cria um novo grupo aberto"""
        try:
            db_grupo = schemas.Grupos(
                name=grupo_data.name,
                lottery_type=grupo_data.lottery_type,
                draw_date=grupo_data.draw_date,
                total_quotas=grupo_data.total_quotas,
                quota_value=grupo_data.quota_value,
                pix_key=grupo_data.pix_key,
                status=schemas.StatusGrupo.OPEN.value,
                prize_amount=0,
                admin_fee_type=schemas.TipoTaxa.PERCENTAGE.value,
                admin_fee_value=0
            )
            self.db.add(db_grupo)
            self.db.commit()
            self.db.refresh(db_grupo)

            logger.info(f"Grupo {db_grupo.id} ({db_grupo.lottery_type}) criado")
            return db_grupo
        except Exception as error:
            self.db.rollback()
            handle_error(error, self.post)

    async def put(self, grupo_id: int, grupo_data: models.GrupoPUT) -> schemas.Grupos:
        """
        Atualiza dados do grupo.

        O total de cotas não pode ficar abaixo do já alocado. Mudança no valor
        da cota recalcula o valor individual de todas as cotas do grupo.
        """
        try:
            grupo = await self.obter(grupo_id)
            update_data = {k: v for k, v in grupo_data.model_dump().items() if v is not None}

            novo_total = update_data.get('total_quotas')
            if novo_total is not None:
                alocadas = await self.get_cotas_alocadas(grupo_id)
                if novo_total < alocadas:
                    raise CotasExcedidasException(
                        f"Não é possível reduzir o total de cotas para {novo_total}. Já existem {alocadas} cotas alocadas."
                    )

            for campo, valor in update_data.items():
                setattr(grupo, campo, valor)

            if 'quota_value' in update_data:
                for cota in grupo.cotas:
                    cota.individual_value = UtilsBolao.calcular_valor_individual(
                        grupo.quota_value, cota.quota_quantity, cota.people_per_quota
                    )

            self.db.commit()
            self.db.refresh(grupo)
            return grupo
        except Exception as error:
            self.db.rollback()
            handle_error(error, self.put)

    async def delete(self, grupo_id: int) -> bool:
        """Remove o grupo com cotas, apostas, resultados e distribuições"""
        try:
            grupo = await self.obter(grupo_id)
            self.db.delete(grupo)
            self.db.commit()

            logger.info(f"Grupo {grupo_id} removido")
            return True
        except Exception as error:
            self.db.rollback()
            handle_error(error, self.delete)

    # ---------------------- Cotas dos Participantes ----------------------

    async def get_cotas_alocadas(self, grupo_id: int, ignorar_participante_id: Optional[int] = None) -> int:
        stmt = select(func.coalesce(func.sum(schemas.GrupoParticipantes.quota_quantity), 0)).where(
            schemas.GrupoParticipantes.group_id == grupo_id
        )
        if ignorar_participante_id is not None:
            stmt = stmt.where(schemas.GrupoParticipantes.participant_id != ignorar_participante_id)
        return self.db.execute(stmt).scalar() or 0

    async def get_cota(self, grupo_id: int, participante_id: int) -> Optional[schemas.GrupoParticipantes]:
        stmt = select(schemas.GrupoParticipantes).where(
            schemas.GrupoParticipantes.group_id == grupo_id,
            schemas.GrupoParticipantes.participant_id == participante_id
        )
        return self.db.execute(stmt).scalars().first()

    async def obter_cota(self, grupo_id: int, participante_id: int) -> schemas.GrupoParticipantes:
        cota = await self.get_cota(grupo_id, participante_id)
        if not cota:
            raise NaoEncontradoException("Participante neste grupo")
        return cota

    async def adicionar_participante(self, grupo_id: int, cota_data: models.CotaPOST) -> schemas.GrupoParticipantes:
        """Inclui um participante no grupo respeitando o limite de cotas"""
        try:
            grupo = await self.obter(grupo_id)
            await RepositorioParticipante(self.db).obter(cota_data.participant_id)

            if await self.get_cota(grupo_id, cota_data.participant_id):
                raise ConflitoException("Participante já está neste grupo")

            alocadas = await self.get_cotas_alocadas(grupo_id)
            if alocadas + cota_data.quota_quantity > grupo.total_quotas:
                raise CotasExcedidasException(
                    f"Limite de cotas excedido. Disponível: {grupo.total_quotas - alocadas} cotas. "
                    f"Solicitado: {cota_data.quota_quantity} cotas."
                )

            db_cota = schemas.GrupoParticipantes(
                group_id=grupo_id,
                participant_id=cota_data.participant_id,
                quota_quantity=cota_data.quota_quantity,
                people_per_quota=cota_data.people_per_quota,
                individual_value=UtilsBolao.calcular_valor_individual(
                    grupo.quota_value, cota_data.quota_quantity, cota_data.people_per_quota
                )
            )
            self.db.add(db_cota)
            self.db.commit()
            self.db.refresh(db_cota)
            return db_cota
        except Exception as error:
            self.db.rollback()
            handle_error(error, self.adicionar_participante)

    async def atualizar_participante(self, grupo_id: int, participante_id: int,
                                     cota_data: models.CotaPUT) -> schemas.GrupoParticipantes:
        """Altera as cotas de um participante (limite calculado sem a cota atual)"""
        try:
            grupo = await self.obter(grupo_id)
            cota = await self.obter_cota(grupo_id, participante_id)

            outras = await self.get_cotas_alocadas(grupo_id, ignorar_participante_id=participante_id)
            if outras + cota_data.quota_quantity > grupo.total_quotas:
                raise CotasExcedidasException(
                    f"Limite de cotas excedido. Disponível: {grupo.total_quotas - outras} cotas. "
                    f"Solicitado: {cota_data.quota_quantity} cotas."
                )

            cota.quota_quantity = cota_data.quota_quantity
            cota.people_per_quota = cota_data.people_per_quota
            cota.individual_value = UtilsBolao.calcular_valor_individual(
                grupo.quota_value, cota_data.quota_quantity, cota_data.people_per_quota
            )

            self.db.commit()
            self.db.refresh(cota)
            return cota
        except Exception as error:
            self.db.rollback()
            handle_error(error, self.atualizar_participante)

    async def remover_participante(self, grupo_id: int, participante_id: int) -> bool:
        try:
            cota = await self.obter_cota(grupo_id, participante_id)
            self.db.delete(cota)
            self.db.commit()
            return True
        except Exception as error:
            self.db.rollback()
            handle_error(error, self.remover_participante)
