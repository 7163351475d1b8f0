import pytest

from bolao.repositorios.premio import RepositorioPremio

API = "/api/v1"
MEGA = [5, 12, 23, 34, 45, 56]


def _status(client, grupo_id, novo):
    return client.patch(f"{API}/groups/{grupo_id}/status", json={"status": novo})


def _calcular(client, grupo_id, valor):
    return client.post(f"{API}/groups/{grupo_id}/calculate-prize", json={"prize_amount": valor})


def _taxa(client, grupo_id, tipo, valor):
    return client.patch(
        f"{API}/groups/{grupo_id}/admin-fee",
        json={"admin_fee_type": tipo, "admin_fee_value": valor},
    )


def _grupo(client, grupo_id):
    return client.get(f"{API}/groups/{grupo_id}").json()["data"]


# ---------------------- Status ----------------------

def test_ciclo_completo_de_status(client, grupo_com_cotas):
    grupo_id = grupo_com_cotas["grupo_id"]

    resposta = _status(client, grupo_id, "closed")
    assert resposta.status_code == 200
    assert resposta.json()["data"] == {"status": "closed"}

    # sem resultado não confere
    assert _status(client, grupo_id, "checked").status_code == 400

    assert client.post(f"{API}/groups/{grupo_id}/results", json={"result_numbers": MEGA}).status_code == 201
    assert _status(client, grupo_id, "checked").status_code == 200

    # sem distribuição não finaliza
    resposta = _status(client, grupo_id, "finalized")
    assert resposta.status_code == 400
    assert resposta.json()["success"] is False

    assert _calcular(client, grupo_id, 1000).status_code == 200
    assert _status(client, grupo_id, "finalized").status_code == 200
    assert _grupo(client, grupo_id)["status"] == "finalized"

    # finalizado é terminal
    for destino in ("open", "closed", "checked", "finalized"):
        assert _status(client, grupo_id, destino).status_code == 400


def test_status_nao_pula_etapas(client, novo_grupo):
    grupo_id = novo_grupo()

    assert _status(client, grupo_id, "finalized").status_code == 400
    assert _status(client, grupo_id, "checked").status_code == 400
    assert _grupo(client, grupo_id)["status"] == "open"


def test_status_desconhecido(client, novo_grupo):
    grupo_id = novo_grupo()

    resposta = _status(client, grupo_id, "archived")
    assert resposta.status_code == 400
    assert "Status inválido" in resposta.json()["message"]


def test_status_grupo_inexistente(client):
    resposta = _status(client, 999, "closed")
    assert resposta.status_code == 404
    assert resposta.json()["message"] == "Grupo não encontrado"


# ---------------------- Taxa de administração ----------------------

def test_configurar_taxa(client, novo_grupo):
    grupo_id = novo_grupo()

    resposta = _taxa(client, grupo_id, "fixed", 50)
    assert resposta.status_code == 200
    assert resposta.json()["data"] == {"admin_fee_type": "fixed", "admin_fee_value": 50}

    grupo = _grupo(client, grupo_id)
    assert grupo["admin_fee_type"] == "fixed"
    assert grupo["admin_fee_value"] == 50


@pytest.mark.parametrize("tipo, valor, mensagem", [
    ("progressive", 10, "Tipo de taxa inválido"),
    (None, 10, "Tipo de taxa inválido"),
    ("percentage", -5, "Valor de taxa inválido"),
    ("fixed", None, "Valor de taxa inválido"),
])
def test_configurar_taxa_invalida(client, novo_grupo, tipo, valor, mensagem):
    grupo_id = novo_grupo()

    resposta = _taxa(client, grupo_id, tipo, valor)
    assert resposta.status_code == 400
    assert resposta.json()["message"] == mensagem

    grupo = _grupo(client, grupo_id)
    assert grupo["admin_fee_type"] == "percentage"
    assert grupo["admin_fee_value"] == 0


def test_configurar_taxa_nao_recalcula_distribuicao(client, grupo_com_cotas):
    grupo_id = grupo_com_cotas["grupo_id"]
    _calcular(client, grupo_id, 1000)

    _taxa(client, grupo_id, "fixed", 400)

    partes = [d["prize_share"] for d in client.get(f"{API}/groups/{grupo_id}/distribution").json()["data"]]
    assert partes == [pytest.approx(750), pytest.approx(250)]


# ---------------------- Cálculo do prêmio ----------------------

def test_calcular_premio_com_taxa_percentual(client, grupo_com_cotas):
    grupo_id = grupo_com_cotas["grupo_id"]
    _taxa(client, grupo_id, "percentage", 10)

    resposta = _calcular(client, grupo_id, 1000)
    assert resposta.status_code == 200
    calculo = resposta.json()["data"]

    assert calculo["prize_amount"] == 1000
    assert calculo["admin_fee"] == pytest.approx(100)
    assert calculo["net_prize"] == pytest.approx(900)

    por_participante = {d["participant_id"]: d for d in calculo["distributions"]}
    ana = por_participante[grupo_com_cotas["ana"]]
    bruno = por_participante[grupo_com_cotas["bruno"]]
    assert ana["quota_fraction"] == pytest.approx(0.25)
    assert ana["prize_share"] == pytest.approx(225)
    assert ana["name"] == "Ana"
    assert bruno["prize_share"] == pytest.approx(675)
    assert bruno["paid_out"] is False

    grupo = _grupo(client, grupo_id)
    assert grupo["status"] == "checked"
    assert grupo["prize_amount"] == 1000


def test_calcular_premio_com_taxa_fixa(client, grupo_com_cotas):
    grupo_id = grupo_com_cotas["grupo_id"]
    _taxa(client, grupo_id, "fixed", 200)

    calculo = _calcular(client, grupo_id, 1000).json()["data"]

    assert calculo["admin_fee"] == 200
    assert calculo["net_prize"] == 800
    assert sum(d["prize_share"] for d in calculo["distributions"]) == pytest.approx(800)


def test_recalculo_substitui_distribuicao(client, grupo_com_cotas):
    grupo_id = grupo_com_cotas["grupo_id"]

    _calcular(client, grupo_id, 1000)
    _calcular(client, grupo_id, 2000)
    _calcular(client, grupo_id, 2000)

    distribuicao = client.get(f"{API}/groups/{grupo_id}/distribution").json()["data"]
    assert len(distribuicao) == 2
    assert sum(d["prize_share"] for d in distribuicao) == pytest.approx(2000)


@pytest.mark.parametrize("valor", [0, -100, None])
def test_calcular_premio_valor_invalido_nao_altera_nada(client, grupo_com_cotas, valor):
    grupo_id = grupo_com_cotas["grupo_id"]
    _calcular(client, grupo_id, 1000)

    resposta = _calcular(client, grupo_id, valor)
    assert resposta.status_code == 400
    assert resposta.json()["message"] == "Valor do prêmio inválido"

    distribuicao = client.get(f"{API}/groups/{grupo_id}/distribution").json()["data"]
    assert sum(d["prize_share"] for d in distribuicao) == pytest.approx(1000)
    assert _grupo(client, grupo_id)["prize_amount"] == 1000


def test_calcular_premio_sem_participantes(client, novo_grupo):
    grupo_id = novo_grupo()

    resposta = _calcular(client, grupo_id, 1000)
    assert resposta.status_code == 400
    assert resposta.json()["message"] == "Nenhum participante no grupo"

    grupo = _grupo(client, grupo_id)
    assert grupo["status"] == "open"
    assert grupo["prize_amount"] == 0
    assert client.get(f"{API}/groups/{grupo_id}/distribution").json()["data"] == []


def test_calcular_premio_grupo_inexistente(client):
    assert _calcular(client, 999, 1000).status_code == 404


def test_calcular_premio_grupo_finalizado(client, grupo_com_cotas):
    grupo_id = grupo_com_cotas["grupo_id"]
    _calcular(client, grupo_id, 1000)
    assert _status(client, grupo_id, "finalized").status_code == 200

    resposta = _calcular(client, grupo_id, 5000)
    assert resposta.status_code == 400

    assert _grupo(client, grupo_id)["prize_amount"] == 1000


def test_taxa_maior_que_premio_gera_partes_negativas(client, grupo_com_cotas):
    grupo_id = grupo_com_cotas["grupo_id"]
    _taxa(client, grupo_id, "fixed", 1200)

    calculo = _calcular(client, grupo_id, 1000).json()["data"]

    assert calculo["net_prize"] == -200
    assert all(d["prize_share"] < 0 for d in calculo["distributions"])


def test_falha_no_calculo_desfaz_tudo(client, grupo_com_cotas, monkeypatch):
    grupo_id = grupo_com_cotas["grupo_id"]
    _calcular(client, grupo_id, 1000)

    async def falha(self, *args, **kwargs):
        raise RuntimeError("falha ao gravar auditoria")

    monkeypatch.setattr(RepositorioPremio, "_registrar_auditoria", falha)
    _taxa(client, grupo_id, "percentage", 50)

    resposta = _calcular(client, grupo_id, 3000)
    assert resposta.status_code == 500

    monkeypatch.undo()
    distribuicao = client.get(f"{API}/groups/{grupo_id}/distribution").json()["data"]
    assert len(distribuicao) == 2
    assert sum(d["prize_share"] for d in distribuicao) == pytest.approx(1000)
    assert _grupo(client, grupo_id)["prize_amount"] == 1000


# ---------------------- Distribuição e liquidação ----------------------

def test_distribuicao_maior_parte_primeiro(client, grupo_com_cotas):
    grupo_id = grupo_com_cotas["grupo_id"]
    _calcular(client, grupo_id, 1000)

    resposta = client.get(f"{API}/groups/{grupo_id}/distribution")
    assert resposta.status_code == 200
    distribuicao = resposta.json()["data"]

    assert [d["name"] for d in distribuicao] == ["Bruno", "Ana"]
    assert distribuicao[0]["phone"] == "11900000002"


def test_distribuicao_grupo_inexistente(client):
    assert client.get(f"{API}/groups/999/distribution").status_code == 404


def test_repasse_liquidacao_e_auditoria(client, grupo_com_cotas):
    grupo_id = grupo_com_cotas["grupo_id"]
    bruno = grupo_com_cotas["bruno"]
    _taxa(client, grupo_id, "percentage", 10)
    _calcular(client, grupo_id, 1000)
    client.post(f"{API}/payments/mark-paid", json={"group_id": grupo_id, "participant_id": bruno, "paid": True})

    resposta = client.patch(f"{API}/groups/{grupo_id}/distribution/{bruno}/payout", json={"paid_out": True})
    assert resposta.status_code == 200
    assert resposta.json()["data"]["paid_out"] is True
    assert resposta.json()["data"]["payout_date"] is not None

    resumo = client.get(f"{API}/groups/{grupo_id}/liquidation").json()["data"]
    assert resumo["total_collected"] == 300
    assert resumo["total_prize"] == pytest.approx(900)
    assert resumo["total_distributed"] == pytest.approx(675)
    assert resumo["remaining_balance"] == pytest.approx(225)
    assert resumo["participants_paid"] == 1
    assert resumo["total_participants"] == 2

    client.patch(f"{API}/groups/{grupo_id}/distribution/{bruno}/payout", json={"paid_out": False})

    auditoria = client.get(f"{API}/groups/{grupo_id}/audit").json()["data"]
    assert [a["action"] for a in auditoria] == ["payout_reverted", "payout", "prize_calculated"]
    assert auditoria[1]["participant_id"] == bruno
    assert auditoria[1]["amount"] == pytest.approx(675)


def test_repasse_sem_distribuicao(client, grupo_com_cotas):
    grupo_id = grupo_com_cotas["grupo_id"]

    resposta = client.patch(
        f"{API}/groups/{grupo_id}/distribution/{grupo_com_cotas['ana']}/payout", json={"paid_out": True}
    )
    assert resposta.status_code == 404


# ---------------------- Relatório ----------------------

def test_relatorio_whatsapp(client, grupo_com_cotas):
    grupo_id = grupo_com_cotas["grupo_id"]
    client.post(f"{API}/groups/{grupo_id}/bets", json={"numbers": [5, 12, 1, 2, 3, 4]})
    client.post(f"{API}/groups/{grupo_id}/bets", json={"numbers": [5, 12, 23, 34, 1, 2]})
    client.post(f"{API}/groups/{grupo_id}/results", json={"result_numbers": MEGA})
    _taxa(client, grupo_id, "percentage", 10)
    _calcular(client, grupo_id, 1000)

    resposta = client.get(f"{API}/groups/{grupo_id}/whatsapp-report")
    assert resposta.status_code == 200
    relatorio = resposta.json()["data"]["report"]

    assert "[05] [12] [23] [34] [45] [56]" in relatorio
    assert "Aposta #1: 2 acertos" in relatorio
    assert "Aposta #2: 4 acertos" in relatorio
    assert "Prêmio Líquido: R$ 900.00" in relatorio
    assert "• Bruno: R$ 675.00 (75.0%)" in relatorio


def test_relatorio_whatsapp_sem_resultado(client, novo_grupo):
    assert client.get(f"{API}/groups/{novo_grupo()}/whatsapp-report").status_code == 404


# ---------------------- Valores não finitos ----------------------

def _json_bruto(client, metodo, url, corpo):
    return client.request(metodo, url, content=corpo, headers={"Content-Type": "application/json"})


@pytest.mark.parametrize("valor", ["NaN", "Infinity", "-Infinity"])
def test_calcular_premio_nao_finito(client, grupo_com_cotas, valor):
    grupo_id = grupo_com_cotas["grupo_id"]
    _calcular(client, grupo_id, 1000)

    resposta = _json_bruto(client, "POST", f"{API}/groups/{grupo_id}/calculate-prize", f'{{"prize_amount": {valor}}}')
    assert resposta.status_code == 400
    assert resposta.json()["message"] == "Valor do prêmio inválido"
    assert _grupo(client, grupo_id)["prize_amount"] == 1000


@pytest.mark.parametrize("valor", ["NaN", "Infinity"])
def test_configurar_taxa_nao_finita(client, novo_grupo, valor):
    grupo_id = novo_grupo()

    resposta = _json_bruto(
        client, "PATCH", f"{API}/groups/{grupo_id}/admin-fee",
        f'{{"admin_fee_type": "percentage", "admin_fee_value": {valor}}}'
    )
    assert resposta.status_code == 400
    assert resposta.json()["message"] == "Valor de taxa inválido"
    assert _grupo(client, grupo_id)["admin_fee_value"] == 0


def test_status_desconhecido_e_validado_antes_do_grupo(client):
    resposta = _status(client, 999, "archived")
    assert resposta.status_code == 400
    assert "Status inválido" in resposta.json()["message"]
