from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, Generic, TypeVar, List, Union, Dict, Any
from datetime import datetime, date
from enum import Enum

DataT = TypeVar("DataT")

class ApiResponse(BaseModel, Generic[DataT]):
    """
    Modelo de resposta padronizado para a API, utilizado tanto para sucesso quanto para erro.

    Attributes:
        success: Indica se a requisição foi bem-sucedida (True) ou falhou (False)
        data: Dados da resposta, pode ser um único objeto ou uma lista
        message: Mensagem descritiva sobre o resultado da operação
        meta: Informações adicionais como totais
        status_code: Código de status HTTP da resposta
    """
    success: bool
    data: Optional[Union[DataT, List[DataT], Dict[str, Any]]] = None
    message: Optional[str] = None
    meta: Optional[Dict[str, Any]] = None
    status_code: int = 200

    model_config = ConfigDict(from_attributes=True)

# ----- Enums -----

class StatusGrupo(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    CHECKED = "checked"
    FINALIZED = "finalized"

class TipoLoteria(str, Enum):
    MEGA_SENA = "mega-sena"
    LOTOFACIL = "lotofacil"
    QUINA = "quina"
    LOTOMANIA = "lotomania"
    DUPLA_SENA = "dupla-sena"

class OrigemResultado(str, Enum):
    MANUAL = "manual"
    API = "api"

# ----- Participantes -----

class ParticipanteBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=300, description="Nome do participante")
    phone: str = Field(..., min_length=1, max_length=30, description="Telefone (único)")

    @field_validator('name', 'phone')
    @classmethod
    def remover_espacos(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Campo obrigatório')
        return v

    model_config = ConfigDict(from_attributes=True)

class ParticipantePOST(ParticipanteBase):
    """Modelo para criação de participantes"""
    pass

class ParticipantePUT(BaseModel):
    """Modelo para atualização de participantes"""
    name: Optional[str] = Field(None, min_length=1, max_length=300)
    phone: Optional[str] = Field(None, min_length=1, max_length=30)

class Participante(ParticipanteBase):
    id: int
    created_at: Optional[datetime] = None

# ----- Grupos -----

class GrupoBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=300, description="Nome do bolão")
    lottery_type: TipoLoteria = Field(..., description="Tipo de loteria")
    draw_date: date = Field(..., description="Data do sorteio")
    total_quotas: int = Field(..., gt=0, description="Total de cotas do bolão")
    quota_value: float = Field(..., gt=0, description="Valor de cada cota")
    pix_key: str = Field(..., min_length=1, max_length=300, description="Chave PIX para pagamento")

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

class GrupoPOST(GrupoBase):
    """Modelo para criação de grupos"""
    pass

class GrupoPUT(BaseModel):
    """Modelo para atualização de grupos"""
    name: Optional[str] = Field(None, min_length=1, max_length=300)
    lottery_type: Optional[TipoLoteria] = None
    draw_date: Optional[date] = None
    total_quotas: Optional[int] = Field(None, gt=0)
    quota_value: Optional[float] = Field(None, gt=0)
    pix_key: Optional[str] = Field(None, min_length=1, max_length=300)

    model_config = ConfigDict(use_enum_values=True)

class Grupo(GrupoBase):
    id: int
    status: StatusGrupo = StatusGrupo.OPEN
    prize_amount: float = 0
    admin_fee_type: str = "percentage"
    admin_fee_value: float = 0
    created_at: Optional[datetime] = None

# ----- Cotas (participantes no grupo) -----

class CotaPOST(BaseModel):
    participant_id: int = Field(..., description="ID do participante")
    quota_quantity: int = Field(..., gt=0, description="Quantidade de cotas")
    people_per_quota: int = Field(1, gt=0, description="Pessoas dividindo cada cota")

class CotaPUT(BaseModel):
    quota_quantity: int = Field(..., gt=0)
    people_per_quota: int = Field(..., gt=0)

# ----- Pagamentos -----

class MarcarPagamentoRequest(BaseModel):
    group_id: int
    participant_id: int
    paid: bool

class RejeitarPagamentoRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000, description="Motivo da rejeição")

# ----- Apostas e Resultados -----

class ApostaRequest(BaseModel):
    numbers: List[int] = Field(..., description="Números da aposta")

class ResultadoRequest(BaseModel):
    result_numbers: List[int] = Field(..., description="Números sorteados")
    draw_date: Optional[datetime] = Field(None, description="Data/hora do sorteio (padrão: agora)")
    sync_source: OrigemResultado = OrigemResultado.MANUAL

    model_config = ConfigDict(use_enum_values=True)

# ----- Premiação -----
# Valores chegam sem restrição de tipo/faixa: a validação é regra de negócio (400, não 422)

class AtualizarStatusRequest(BaseModel):
    status: str = Field(..., description="Novo status: open, closed, checked ou finalized")

class TaxaAdministracaoRequest(BaseModel):
    admin_fee_type: Optional[str] = Field(None, description="percentage ou fixed")
    admin_fee_value: Optional[float] = Field(None, description="Percentual ou valor fixo (>= 0)")

class CalcularPremioRequest(BaseModel):
    prize_amount: Optional[float] = Field(None, description="Valor bruto do prêmio (> 0)")

class PagamentoPremioRequest(BaseModel):
    paid_out: bool = Field(..., description="Se a parte do prêmio já foi paga ao participante")

class DistribuicaoPremio(BaseModel):
    id: Optional[int] = None
    group_id: int
    participant_id: int
    quota_fraction: float
    prize_share: float
    paid_out: bool = False
    payout_date: Optional[datetime] = None
    name: Optional[str] = None
    phone: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class ResultadoCalculoPremio(BaseModel):
    prize_amount: float
    admin_fee: float
    net_prize: float
    distributions: List[DistribuicaoPremio]

class ResumoLiquidacao(BaseModel):
    total_collected: float
    total_prize: float
    total_distributed: float
    remaining_balance: float
    participants_paid: int
    total_participants: int
