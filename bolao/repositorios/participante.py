from sqlalchemy import select, func
from sqlalchemy.orm import Session
from bolao.database import models, schemas
from bolao.utils.error_handler import handle_error
from bolao.utils.exceptions_bolao import NaoEncontradoException, ConflitoException
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

class RepositorioParticipante:
    """Repositório para o cadastro de participantes"""

    def __init__(self, db: Session):
        self.db = db

    async def get_all(self) -> List[schemas.Participantes]:
        """Lista todos os participantes ordenados por nome"""
        try:
            stmt = select(schemas.Participantes).order_by(schemas.Participantes.name.asc())
            return self.db.execute(stmt).scalars().all()
        except Exception as error:
            handle_error(error, self.get_all)

    async def get_by_id(self, participante_id: int) -> Optional[schemas.Participantes]:
        try:
            return self.db.get(schemas.Participantes, participante_id)
        except Exception as error:
            handle_error(error, self.get_by_id)

    async def obter(self, participante_id: int) -> schemas.Participantes:
        """Recupera o participante ou lança NaoEncontradoException"""
        participante = await self.get_by_id(participante_id)
        if not participante:
            raise NaoEncontradoException("Participante")
        return participante

    async def _telefone_em_uso(self, telefone: str, ignorar_id: Optional[int] = None) -> bool:
        stmt = select(func.count(schemas.Participantes.id)).where(schemas.Participantes.phone == telefone)
        if ignorar_id:
            stmt = stmt.where(schemas.Participantes.id != ignorar_id)
        return (self.db.execute(stmt).scalar() or 0) > 0

    async def post(self, participante_data: models.ParticipantePOST) -> schemas.Participantes:
        """Cadastra um novo participante"""
        try:
            if await self._telefone_em_uso(participante_data.phone):
                raise ConflitoException("Telefone já cadastrado")

            db_participante = schemas.Participantes(
                name=participante_data.name,
                phone=participante_data.phone
            )
            self.db.add(db_participante)
            self.db.commit()
            self.db.refresh(db_participante)

            logger.info(f"Participante {db_participante.id} cadastrado")
            return db_participante
        except Exception as error:
            self.db.rollback()
            handle_error(error, self.post)

    async def put(self, participante_id: int, participante_data: models.ParticipantePUT) -> schemas.Participantes:
        """Atualiza nome e/ou telefone"""
        try:
            participante = await self.obter(participante_id)

            update_data = {k: v.strip() for k, v in participante_data.model_dump().items() if v is not None}
            if 'phone' in update_data and await self._telefone_em_uso(update_data['phone'], participante_id):
                raise ConflitoException("Telefone já cadastrado")

            for campo, valor in update_data.items():
                setattr(participante, campo, valor)

            self.db.commit()
            self.db.refresh(participante)
            return participante
        except Exception as error:
            self.db.rollback()
            handle_error(error, self.put)

    async def delete(self, participante_id: int) -> bool:
        """Remove o participante e suas cotas/distribuições"""
        try:
            participante = await self.obter(participante_id)
            self.db.delete(participante)
            self.db.commit()

            logger.info(f"Participante {participante_id} removido")
            return True
        except Exception as error:
            self.db.rollback()
            handle_error(error, self.delete)
