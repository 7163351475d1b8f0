from datetime import date, datetime
import math
from typing import List, Dict, Any, Optional
from bolao.utils.config_bolao import ConfigBolao
from bolao.utils.exceptions_bolao import (
    NumerosInvalidosException,
    TransicaoInvalidaException,
    StatusInvalidoException,
    PreCondicaoException,
    ValorPremioInvalidoException,
    TipoTaxaInvalidoException,
    ValorTaxaInvalidoException,
    SemParticipantesException,
)

class UtilsBolao:
    """Regras de negócio puras do sistema de bolões (sem acesso ao banco)"""

    # ---------------------- Tipos de Loteria ----------------------

    @staticmethod
    def validar_numeros(tipo_loteria: str, numeros: List[int]) -> None:
        """Valida quantidade, unicidade e faixa dos números para o tipo de loteria"""
        config = ConfigBolao.TIPOS_LOTERIA.get(tipo_loteria)
        if not config:
            raise NumerosInvalidosException("Tipo de loteria inválido")

        if len(numeros) != config['quantidade_numeros']:
            raise NumerosInvalidosException(
                f"{config['nome']} requer exatamente {config['quantidade_numeros']} números"
            )

        if len(set(numeros)) != len(numeros):
            raise NumerosInvalidosException("Números duplicados não são permitidos")

        for numero in numeros:
            if numero < config['numero_min'] or numero > config['numero_max']:
                raise NumerosInvalidosException(
                    f"Números devem estar entre {config['numero_min']} e {config['numero_max']}"
                )

    @staticmethod
    def nome_loteria(tipo_loteria: str) -> str:
        config = ConfigBolao.TIPOS_LOTERIA.get(tipo_loteria)
        return config['nome'] if config else tipo_loteria

    # ---------------------- Conferência ----------------------

    @staticmethod
    def calcular_acertos(numeros_aposta: List[int], numeros_resultado: List[int]) -> List[int]:
        """Interseção preservando a ordem dos números da aposta"""
        sorteados = set(numeros_resultado)
        return [n for n in numeros_aposta if n in sorteados]

    @staticmethod
    def conferir_apostas(apostas: List[Dict[str, Any]], numeros_resultado: List[int]) -> List[Dict[str, Any]]:
        """Gera a lista de acertos de cada aposta ({id, numbers}) contra o resultado"""
        acertos = []
        for aposta in apostas:
            numeros_acertados = UtilsBolao.calcular_acertos(aposta['numbers'], numeros_resultado)
            acertos.append({
                'bet_id': aposta['id'],
                'matched_numbers': numeros_acertados,
                'match_count': len(numeros_acertados)
            })
        return acertos

    # ---------------------- Cotas ----------------------

    @staticmethod
    def calcular_valor_individual(valor_cota: float, quantidade_cotas: int, pessoas_por_cota: int) -> float:
        """valor_cota × quantidade ÷ pessoas que dividem a cota"""
        return (valor_cota * quantidade_cotas) / pessoas_por_cota

    # ---------------------- Status do Grupo ----------------------

    @staticmethod
    def validar_transicao(status_atual: Optional[str], status_destino: str,
                          possui_resultado: bool, possui_distribuicao: bool) -> None:
        """
        Valida a transição de status do grupo.

        Só é permitido avançar para o sucessor imediato na sequência
        open -> closed -> checked -> finalized. Para 'checked' é preciso ter
        resultado do sorteio cadastrado; para 'finalized', distribuição do prêmio.

        Raises:
            StatusInvalidoException: status de destino desconhecido
            TransicaoInvalidaException: destino não é o sucessor do status atual
            PreCondicaoException: resultado ou distribuição ausentes
        """
        if status_destino not in ConfigBolao.STATUS_GRUPO:
            raise StatusInvalidoException(status_destino)

        atual = status_atual or 'open'
        if status_destino not in ConfigBolao.TRANSICOES_STATUS.get(atual, []):
            raise TransicaoInvalidaException(atual, status_destino)

        if status_destino == 'checked' and not possui_resultado:
            raise PreCondicaoException("Não é possível marcar como conferido sem resultado cadastrado")

        if status_destino == 'finalized' and not possui_distribuicao:
            raise PreCondicaoException("Não é possível finalizar sem calcular a distribuição do prêmio")

    # ---------------------- Taxa de Administração ----------------------

    @staticmethod
    def validar_taxa(tipo_taxa: Optional[str], valor_taxa: Optional[float]) -> None:
        if not tipo_taxa or tipo_taxa not in ConfigBolao.TIPOS_TAXA:
            raise TipoTaxaInvalidoException()
        if valor_taxa is None or isinstance(valor_taxa, bool) or not math.isfinite(valor_taxa) or not valor_taxa >= 0:
            raise ValorTaxaInvalidoException()

    @staticmethod
    def calcular_taxa_administracao(valor_bruto: float, tipo_taxa: str, valor_taxa: Optional[float]) -> float:
        """Percentual sobre o prêmio bruto ou valor fixo"""
        valor_taxa = valor_taxa or 0
        if tipo_taxa == 'percentage':
            return valor_bruto * (valor_taxa / 100)
        if tipo_taxa == 'fixed':
            return valor_taxa
        raise TipoTaxaInvalidoException()

    # ---------------------- Distribuição do Prêmio ----------------------

    @staticmethod
    def validar_valor_premio(valor_bruto: Optional[float]) -> None:
        if valor_bruto is None or isinstance(valor_bruto, bool) or not math.isfinite(valor_bruto) or not valor_bruto > 0:
            raise ValorPremioInvalidoException()

    @staticmethod
    def calcular_distribuicao(valor_bruto: float, tipo_taxa: str, valor_taxa: Optional[float],
                              contribuicoes: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Calcula taxa, prêmio líquido e a parte de cada participante.

        Cada contribuição precisa de 'participant_id' e 'individual_value';
        demais chaves (nome, telefone) são repassadas para a distribuição.
        A fração de cada um é individual_value / total arrecadado. O prêmio
        líquido não é limitado a zero: taxa maior que o prêmio gera partes
        negativas. Não há correção de arredondamento.
        """
        UtilsBolao.validar_valor_premio(valor_bruto)

        taxa = UtilsBolao.calcular_taxa_administracao(valor_bruto, tipo_taxa, valor_taxa)
        premio_liquido = valor_bruto - taxa

        total_arrecadado = sum(c['individual_value'] for c in contribuicoes)
        if not contribuicoes or total_arrecadado == 0:
            raise SemParticipantesException()

        distribuicoes = []
        for contribuicao in contribuicoes:
            fracao = contribuicao['individual_value'] / total_arrecadado
            distribuicao = {k: v for k, v in contribuicao.items() if k != 'individual_value'}
            distribuicao.update({
                'quota_fraction': fracao,
                'prize_share': premio_liquido * fracao
            })
            distribuicoes.append(distribuicao)

        return {
            'prize_amount': valor_bruto,
            'admin_fee': taxa,
            'net_prize': premio_liquido,
            'total_collected': total_arrecadado,
            'distributions': distribuicoes
        }

    # ---------------------- Relatório ----------------------

    @staticmethod
    def formatar_data(valor) -> str:
        if isinstance(valor, (date, datetime)):
            return valor.strftime('%d/%m/%Y')
        return str(valor)

    @staticmethod
    def gerar_relatorio_whatsapp(grupo: Dict[str, Any], numeros_resultado: List[int],
                                 acertos: List[Dict[str, Any]], apostas: List[Dict[str, Any]],
                                 distribuicoes: List[Dict[str, Any]]) -> str:
        """Monta o texto de resultado do bolão para envio no WhatsApp"""
        relatorio = f"🎰 RESULTADO DO BOLÃO - {grupo['name']}\n\n"
        relatorio += f"📅 Sorteio: {UtilsBolao.formatar_data(grupo['draw_date'])}\n"
        relatorio += f"🎲 Tipo: {UtilsBolao.nome_loteria(grupo['lottery_type'])}\n\n"

        relatorio += "🏆 NÚMEROS SORTEADOS\n"
        relatorio += " ".join(f"[{n:02d}]" for n in numeros_resultado)
        relatorio += "\n\n"

        if apostas:
            acertos_por_aposta = {a['bet_id']: a['match_count'] for a in acertos}
            relatorio += "✅ APOSTAS E ACERTOS\n"
            for indice, aposta in enumerate(apostas, 1):
                quantidade = acertos_por_aposta.get(aposta['id'], 0)
                relatorio += f"Aposta #{indice}: {quantidade} {'acerto' if quantidade == 1 else 'acertos'}\n"
            relatorio += "\n"

        valor_premio = grupo.get('prize_amount') or 0
        if valor_premio > 0:
            taxa = UtilsBolao.calcular_taxa_administracao(
                valor_premio, grupo['admin_fee_type'], grupo.get('admin_fee_value')
            )
            premio_liquido = valor_premio - taxa

            relatorio += "💰 PREMIAÇÃO\n"
            relatorio += f"Valor Total: R$ {valor_premio:.2f}\n"
            if taxa > 0:
                if grupo['admin_fee_type'] == 'percentage':
                    rotulo = f"{grupo['admin_fee_value']:g}%"
                else:
                    rotulo = f"R$ {grupo['admin_fee_value']:.2f}"
                relatorio += f"Taxa Organização: R$ {taxa:.2f} ({rotulo})\n"
            relatorio += f"Prêmio Líquido: R$ {premio_liquido:.2f}\n\n"

            if distribuicoes:
                relatorio += "💵 DISTRIBUIÇÃO POR PARTICIPANTE\n"
                for d in distribuicoes:
                    percentual = d['quota_fraction'] * 100
                    relatorio += f"• {d['name']}: R$ {d['prize_share']:.2f} ({percentual:.1f}%)\n"
                relatorio += "\n"

        relatorio += "✨ Parabéns aos ganhadores!"
        return relatorio
