class BolaoException(Exception):
    """Exceção base para o sistema de bolões"""
    status_code = 400

class NaoEncontradoException(BolaoException):
    """Grupo, participante, aposta ou resultado inexistente"""
    status_code = 404

    def __init__(self, recurso: str):
        super().__init__(f"{recurso} não encontrado")

class TransicaoInvalidaException(BolaoException):
    """Mudança de status fora da sequência open -> closed -> checked -> finalized"""
    def __init__(self, atual: str, destino: str):
        super().__init__(f"Transição inválida de {atual} para {destino}")

class StatusInvalidoException(TransicaoInvalidaException):
    """Status de destino desconhecido"""
    def __init__(self, destino: str):
        BolaoException.__init__(self, f"Status inválido: {destino}")

class PreCondicaoException(BolaoException):
    """Dados necessários para a transição ainda não existem"""
    pass

class ValorPremioInvalidoException(BolaoException):
    """Valor do prêmio ausente ou menor/igual a zero"""
    def __init__(self):
        super().__init__("Valor do prêmio inválido")

class TipoTaxaInvalidoException(BolaoException):
    """Tipo de taxa de administração desconhecido"""
    def __init__(self):
        super().__init__("Tipo de taxa inválido")

class ValorTaxaInvalidoException(BolaoException):
    """Valor de taxa ausente ou negativo"""
    def __init__(self):
        super().__init__("Valor de taxa inválido")

class SemParticipantesException(BolaoException):
    """Grupo sem contribuições para dividir o prêmio"""
    def __init__(self):
        super().__init__("Nenhum participante no grupo")

class NumerosInvalidosException(BolaoException):
    """Números de aposta/resultado fora do formato da loteria"""
    pass

class CotasExcedidasException(BolaoException):
    """Capacidade de cotas do grupo ultrapassada"""
    pass

class ConflitoException(BolaoException):
    """Registro duplicado (telefone, participante no grupo)"""
    pass

class ArquivoInvalidoException(BolaoException):
    """Comprovante com tipo ou tamanho não permitido"""
    pass
