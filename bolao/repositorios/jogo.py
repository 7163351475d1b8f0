from sqlalchemy import select, desc
from sqlalchemy.orm import Session
from bolao.database import models, schemas
from bolao.utils.error_handler import handle_error
from bolao.utils.utils_bolao import UtilsBolao
from bolao.utils.exceptions_bolao import NaoEncontradoException
from bolao.repositorios.grupo import RepositorioGrupo
from typing import List, Optional, Dict, Any
import json
import logging

logger = logging.getLogger(__name__)

class RepositorioJogo:
    """Repositório de apostas, resultados de sorteio e conferência de acertos"""

    def __init__(self, db: Session):
        self.db = db
        self.repo_grupo = RepositorioGrupo(db)

    # ---------------------- Consultas ----------------------

    async def get_apostas(self, grupo_id: int) -> List[schemas.Apostas]:
        stmt = select(schemas.Apostas).where(
            schemas.Apostas.group_id == grupo_id
        ).order_by(desc(schemas.Apostas.created_at), desc(schemas.Apostas.id))
        return self.db.execute(stmt).scalars().all()

    async def listar_apostas(self, grupo_id: int) -> List[Dict[str, Any]]:
        """Apostas do grupo, mais recentes primeiro"""
        await self.repo_grupo.obter(grupo_id)
        try:
            return [aposta.to_dict() for aposta in await self.get_apostas(grupo_id)]
        except Exception as error:
            handle_error(error, self.listar_apostas)

    async def get_resultado_atual(self, grupo_id: int) -> Optional[schemas.ResultadosSorteio]:
        """Resultado vigente: o de draw_date mais recente"""
        stmt = select(schemas.ResultadosSorteio).where(
            schemas.ResultadosSorteio.group_id == grupo_id
        ).order_by(
            desc(schemas.ResultadosSorteio.draw_date),
            desc(schemas.ResultadosSorteio.id)
        ).limit(1)
        return self.db.execute(stmt).scalars().first()

    async def conferir(self, grupo_id: int) -> Dict[str, Any]:
        """Resultado vigente com os acertos e as apostas do grupo"""
        grupo = await self.repo_grupo.obter(grupo_id)
        resultado = await self.get_resultado_atual(grupo_id)
        if not resultado:
            raise NaoEncontradoException("Resultado para este grupo")

        conferencia = resultado.to_dict()
        conferencia['lottery_type'] = grupo.lottery_type
        conferencia['group_name'] = grupo.name
        conferencia['bets'] = [aposta.to_dict() for aposta in await self.get_apostas(grupo_id)]
        return conferencia

    # ---------------------- Conferência ----------------------

    async def _recalcular_acertos(self, grupo_id: int) -> None:
        """Reconfere todas as apostas contra o resultado vigente, se houver"""
        resultado = await self.get_resultado_atual(grupo_id)
        if not resultado:
            return

        apostas = [{'id': a.id, 'numbers': a.get_numeros()} for a in await self.get_apostas(grupo_id)]
        acertos = UtilsBolao.conferir_apostas(apostas, resultado.get_numeros())
        resultado.matches = json.dumps(acertos)

    # ---------------------- Apostas ----------------------

    async def registrar_aposta(self, grupo_id: int, aposta_data: models.ApostaRequest) -> Dict[str, Any]:
        """Registra uma aposta e, havendo resultado, já confere os acertos"""
        grupo = await self.repo_grupo.obter(grupo_id)
        UtilsBolao.validar_numeros(grupo.lottery_type, aposta_data.numbers)

        try:
            db_aposta = schemas.Apostas(group_id=grupo_id, numbers=json.dumps(aposta_data.numbers))
            self.db.add(db_aposta)
            self.db.flush()

            await self._recalcular_acertos(grupo_id)
            self.db.commit()
            self.db.refresh(db_aposta)

            aposta = db_aposta.to_dict()
            resultado = await self.get_resultado_atual(grupo_id)
            if resultado:
                acerto = next((a for a in resultado.get_acertos() if a['bet_id'] == db_aposta.id), None)
                aposta['auto_checked'] = True
                aposta['match_count'] = acerto['match_count'] if acerto else 0
            return aposta
        except Exception as error:
            self.db.rollback()
            handle_error(error, self.registrar_aposta)

    async def obter_aposta(self, grupo_id: int, aposta_id: int) -> schemas.Apostas:
        stmt = select(schemas.Apostas).where(
            schemas.Apostas.id == aposta_id,
            schemas.Apostas.group_id == grupo_id
        )
        aposta = self.db.execute(stmt).scalars().first()
        if not aposta:
            raise NaoEncontradoException("Aposta")
        return aposta

    async def atualizar_aposta(self, grupo_id: int, aposta_id: int, aposta_data: models.ApostaRequest) -> Dict[str, Any]:
        grupo = await self.repo_grupo.obter(grupo_id)
        UtilsBolao.validar_numeros(grupo.lottery_type, aposta_data.numbers)

        try:
            aposta = await self.obter_aposta(grupo_id, aposta_id)
            aposta.numbers = json.dumps(aposta_data.numbers)
            self.db.flush()

            await self._recalcular_acertos(grupo_id)
            self.db.commit()
            self.db.refresh(aposta)
            return aposta.to_dict()
        except Exception as error:
            self.db.rollback()
            handle_error(error, self.atualizar_aposta)

    async def remover_aposta(self, grupo_id: int, aposta_id: int) -> bool:
        try:
            aposta = await self.obter_aposta(grupo_id, aposta_id)
            self.db.delete(aposta)
            self.db.flush()

            await self._recalcular_acertos(grupo_id)
            self.db.commit()
            return True
        except Exception as error:
            self.db.rollback()
            handle_error(error, self.remover_aposta)

    # ---------------------- Resultados ----------------------

    async def registrar_resultado(self, grupo_id: int, resultado_data: models.ResultadoRequest) -> Dict[str, Any]:
        """Registra o resultado do sorteio e confere todas as apostas do grupo"""
        grupo = await self.repo_grupo.obter(grupo_id)
        UtilsBolao.validar_numeros(grupo.lottery_type, resultado_data.result_numbers)

        try:
            apostas = [{'id': a.id, 'numbers': a.get_numeros()} for a in await self.get_apostas(grupo_id)]
            acertos = UtilsBolao.conferir_apostas(apostas, resultado_data.result_numbers)

            db_resultado = schemas.ResultadosSorteio(
                group_id=grupo_id,
                result_numbers=json.dumps(resultado_data.result_numbers),
                matches=json.dumps(acertos),
                sync_source=resultado_data.sync_source
            )
            if resultado_data.draw_date:
                db_resultado.draw_date = resultado_data.draw_date

            self.db.add(db_resultado)
            self.db.commit()
            self.db.refresh(db_resultado)

            logger.info(f"Resultado registrado para o grupo {grupo_id}: {len(acertos)} apostas conferidas")
            return db_resultado.to_dict()
        except Exception as error:
            self.db.rollback()
            handle_error(error, self.registrar_resultado)
