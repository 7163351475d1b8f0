from sqlalchemy import Column, ForeignKey, Integer, String, Boolean, DateTime, Text, Float, Date, UniqueConstraint, Index
from sqlalchemy.orm import relationship, validates
from sqlalchemy.sql import func
from sqlalchemy.ext.hybrid import hybrid_property
from enum import Enum as PyEnum
from bolao.database.db import Base
import json

class StatusGrupo(PyEnum):
    OPEN = "open"
    CLOSED = "closed"
    CHECKED = "checked"
    FINALIZED = "finalized"

class TipoTaxa(PyEnum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"

class StatusPagamento(PyEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

class Participantes(Base):
    __tablename__ = 'participants'

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    phone = Column(String(30), nullable=False, unique=True, index=True)
    name = Column(String(300), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relacionamentos
    cotas = relationship('GrupoParticipantes', back_populates='participante', cascade='all, delete-orphan')
    distribuicoes = relationship('DistribuicoesPremio', back_populates='participante', cascade='all, delete-orphan')
    # Sem cascade: ao remover o participante a auditoria fica com participant_id nulo
    auditorias = relationship('AuditoriaLiquidacao', back_populates='participante')

    def __repr__(self):
        return f"<Participante(nome='{self.name}', telefone='{self.phone}')>"

class Grupos(Base):
    __tablename__ = 'groups'

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(300), nullable=False)
    lottery_type = Column(String(30), nullable=False)
    draw_date = Column(Date, nullable=False, index=True)
    total_quotas = Column(Integer, nullable=False)
    quota_value = Column(Float, nullable=False)
    pix_key = Column(String(300), nullable=False)

    # Ciclo de vida e premiação
    status = Column(String(20), nullable=False, default=StatusGrupo.OPEN.value)
    prize_amount = Column(Float, nullable=False, default=0)
    admin_fee_type = Column(String(20), nullable=False, default=TipoTaxa.PERCENTAGE.value)
    admin_fee_value = Column(Float, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relacionamentos
    cotas = relationship('GrupoParticipantes', back_populates='grupo', cascade='all, delete-orphan')
    apostas = relationship('Apostas', back_populates='grupo', cascade='all, delete-orphan')
    resultados = relationship('ResultadosSorteio', back_populates='grupo', cascade='all, delete-orphan')
    distribuicoes = relationship('DistribuicoesPremio', back_populates='grupo', cascade='all, delete-orphan')
    auditorias = relationship('AuditoriaLiquidacao', back_populates='grupo', cascade='all, delete-orphan')

    @hybrid_property
    def cotas_alocadas(self):
        """Soma das cotas já distribuídas entre os participantes"""
        return sum(c.quota_quantity for c in self.cotas)

    @validates('status')
    def validate_status(self, key, value):
        validos = [s.value for s in StatusGrupo]
        if value not in validos:
            raise ValueError(f"Status deve ser um dos seguintes: {', '.join(validos)}")
        return value

    @validates('admin_fee_type')
    def validate_admin_fee_type(self, key, value):
        if value not in [t.value for t in TipoTaxa]:
            raise ValueError("Tipo de taxa deve ser 'percentage' ou 'fixed'")
        return value

    def __repr__(self):
        return f"<Grupo(nome='{self.name}', loteria='{self.lottery_type}', status='{self.status}')>"

class GrupoParticipantes(Base):
    """Cotas de um participante em um grupo (livro de contribuições)"""
    __tablename__ = 'group_participants'

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    group_id = Column(Integer, ForeignKey('groups.id', ondelete='CASCADE'), nullable=False)
    participant_id = Column(Integer, ForeignKey('participants.id', ondelete='CASCADE'), nullable=False)
    quota_quantity = Column(Integer, nullable=False, default=1)
    people_per_quota = Column(Integer, nullable=False, default=1)
    individual_value = Column(Float, nullable=False)

    # Pagamento
    paid = Column(Boolean, default=False)
    payment_date = Column(DateTime(timezone=True), nullable=True)
    payment_status = Column(String(20), default=StatusPagamento.PENDING.value)
    receipt_path = Column(String(500), nullable=True)
    rejection_reason = Column(Text, nullable=True)
    rejection_date = Column(DateTime(timezone=True), nullable=True)

    grupo = relationship('Grupos', back_populates='cotas')
    participante = relationship('Participantes', back_populates='cotas')

    __table_args__ = (
        UniqueConstraint('group_id', 'participant_id', name='uk_grupo_participante'),
        Index('idx_group_participants_grupo', 'group_id'),
    )

    @validates('quota_quantity', 'people_per_quota')
    def validate_positivo(self, key, value):
        if value is None or value <= 0:
            raise ValueError("Quantidade de cotas e pessoas devem ser maiores que zero")
        return value

    def __repr__(self):
        return f"<GrupoParticipante(grupo={self.group_id}, participante={self.participant_id}, cotas={self.quota_quantity})>"

class Apostas(Base):
    __tablename__ = 'bets'

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    group_id = Column(Integer, ForeignKey('groups.id', ondelete='CASCADE'), nullable=False, index=True)
    numbers = Column(Text, nullable=False)  # JSON array
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    grupo = relationship('Grupos', back_populates='apostas')

    def get_numeros(self):
        return json.loads(self.numbers)

    def to_dict(self):
        return {
            'id': self.id,
            'group_id': self.group_id,
            'numbers': self.get_numeros(),
            'created_at': self.created_at
        }

class ResultadosSorteio(Base):
    __tablename__ = 'draw_results'

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    group_id = Column(Integer, ForeignKey('groups.id', ondelete='CASCADE'), nullable=False)
    result_numbers = Column(Text, nullable=False)  # JSON array
    draw_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    matches = Column(Text, nullable=True)  # JSON array de {bet_id, matched_numbers, match_count}
    sync_source = Column(String(10), default='manual')

    grupo = relationship('Grupos', back_populates='resultados')

    __table_args__ = (
        Index('idx_draw_results_grupo_data', 'group_id', 'draw_date'),
    )

    def get_numeros(self):
        return json.loads(self.result_numbers)

    def get_acertos(self):
        return json.loads(self.matches) if self.matches else []

    def to_dict(self):
        return {
            'id': self.id,
            'group_id': self.group_id,
            'result_numbers': self.get_numeros(),
            'draw_date': self.draw_date,
            'matches': self.get_acertos(),
            'sync_source': self.sync_source
        }

class DistribuicoesPremio(Base):
    __tablename__ = 'prize_distributions'

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    group_id = Column(Integer, ForeignKey('groups.id', ondelete='CASCADE'), nullable=False)
    participant_id = Column(Integer, ForeignKey('participants.id', ondelete='CASCADE'), nullable=False)
    quota_fraction = Column(Float, nullable=False)
    prize_share = Column(Float, nullable=False)
    paid_out = Column(Boolean, default=False)
    payout_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    grupo = relationship('Grupos', back_populates='distribuicoes')
    participante = relationship('Participantes', back_populates='distribuicoes')

    __table_args__ = (
        UniqueConstraint('group_id', 'participant_id', name='uk_distribuicao_grupo_participante'),
    )

    def __repr__(self):
        return f"<DistribuicaoPremio(grupo={self.group_id}, participante={self.participant_id}, parte={self.prize_share})>"

class AuditoriaLiquidacao(Base):
    __tablename__ = 'liquidation_audit'

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    group_id = Column(Integer, ForeignKey('groups.id', ondelete='CASCADE'), nullable=False)
    action = Column(String(30), nullable=False)
    participant_id = Column(Integer, ForeignKey('participants.id', ondelete='SET NULL'), nullable=True)
    amount = Column(Float, nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    grupo = relationship('Grupos', back_populates='auditorias')
    participante = relationship('Participantes', back_populates='auditorias')
