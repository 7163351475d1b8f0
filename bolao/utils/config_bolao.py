import os
from dotenv import dotenv_values

config = dotenv_values(".env")


def _config(chave: str, padrao: str) -> str:
    """Variável de ambiente tem precedência sobre o arquivo .env"""
    return os.getenv(chave) or config.get(chave) or padrao


class ConfigBolao:
    """Configurações específicas do sistema de bolões"""

    # Ambiente
    DATABASE_URL = _config("DATABASE_URL", "sqlite:///./bolao.db")
    UPLOAD_DIR = _config("UPLOAD_DIR", "uploads")
    ERROR_LOG_FILE = _config("ERROR_LOG_FILE", "logs/erros.log")
    LOG_LEVEL = _config("LOG_LEVEL", "INFO")
    TIMEZONE = "America/Sao_Paulo"

    # Tipos de loteria (quantidade de números e faixa válida)
    TIPOS_LOTERIA = {
        'mega-sena': {
            'nome': 'Mega-Sena',
            'quantidade_numeros': 6,
            'numero_min': 1,
            'numero_max': 60
        },
        'lotofacil': {
            'nome': 'Lotofácil',
            'quantidade_numeros': 15,
            'numero_min': 1,
            'numero_max': 25
        },
        'quina': {
            'nome': 'Quina',
            'quantidade_numeros': 5,
            'numero_min': 1,
            'numero_max': 80
        },
        'lotomania': {
            'nome': 'Lotomania',
            'quantidade_numeros': 50,
            'numero_min': 0,
            'numero_max': 99
        },
        'dupla-sena': {
            'nome': 'Dupla Sena',
            'quantidade_numeros': 6,
            'numero_min': 1,
            'numero_max': 50
        }
    }

    # Ciclo de vida do grupo: open -> closed -> checked -> finalized
    STATUS_GRUPO = ['open', 'closed', 'checked', 'finalized']
    TRANSICOES_STATUS = {
        'open': ['closed'],
        'closed': ['checked'],
        'checked': ['finalized'],
        'finalized': []
    }

    # Taxa de administração
    TIPOS_TAXA = ['percentage', 'fixed']
    TIPO_TAXA_PADRAO = 'percentage'

    # Pagamentos
    STATUS_PAGAMENTO = ['pending', 'approved', 'rejected']
    ORIGENS_RESULTADO = ['manual', 'api']

    # Comprovantes
    TAMANHO_MAX_COMPROVANTE = 5 * 1024 * 1024  # 5MB
    EXTENSOES_COMPROVANTE = ['.jpeg', '.jpg', '.png', '.pdf']

    # Auditoria de liquidação
    ACAO_PREMIO_CALCULADO = 'prize_calculated'
    ACAO_PAGAMENTO_PREMIO = 'payout'
    ACAO_PAGAMENTO_ESTORNADO = 'payout_reverted'
