import pytest

API = "/api/v1"
RESULTADO = [4, 8, 15, 16, 23, 42]


def _apostar(client, grupo_id, numeros):
    return client.post(f"{API}/groups/{grupo_id}/bets", json={"numbers": numeros})


def _acertos_por_aposta(client, grupo_id):
    conferencia = client.get(f"{API}/groups/{grupo_id}/check").json()["data"]
    return {a["bet_id"]: a for a in conferencia["matches"]}


def test_registrar_aposta(client, novo_grupo):
    grupo_id = novo_grupo()

    resposta = _apostar(client, grupo_id, [1, 2, 3, 4, 5, 6])
    assert resposta.status_code == 201
    aposta = resposta.json()["data"]
    assert aposta["numbers"] == [1, 2, 3, 4, 5, 6]
    assert "auto_checked" not in aposta


@pytest.mark.parametrize("numeros", [
    [1, 2, 3, 4, 5],
    [1, 2, 3, 4, 5, 5],
    [1, 2, 3, 4, 5, 61],
])
def test_aposta_invalida(client, novo_grupo, numeros):
    grupo_id = novo_grupo()

    resposta = _apostar(client, grupo_id, numeros)
    assert resposta.status_code == 400
    assert client.get(f"{API}/groups/{grupo_id}/bets").json()["data"] == []


def test_aposta_respeita_o_tipo_de_loteria(client, novo_grupo):
    grupo_id = novo_grupo(lottery_type="quina")

    assert _apostar(client, grupo_id, [1, 2, 3, 4, 80]).status_code == 201
    assert _apostar(client, grupo_id, [1, 2, 3, 4, 5, 6]).status_code == 400


def test_listar_apostas_mais_recentes_primeiro(client, novo_grupo):
    grupo_id = novo_grupo()
    primeira = _apostar(client, grupo_id, [1, 2, 3, 4, 5, 6]).json()["data"]["id"]
    segunda = _apostar(client, grupo_id, [7, 8, 9, 10, 11, 12]).json()["data"]["id"]

    apostas = client.get(f"{API}/groups/{grupo_id}/bets").json()["data"]
    assert [a["id"] for a in apostas] == [segunda, primeira]


def test_resultado_confere_apostas(client, novo_grupo):
    grupo_id = novo_grupo()
    aposta_id = _apostar(client, grupo_id, [42, 1, 15, 2, 4, 3]).json()["data"]["id"]

    resposta = client.post(f"{API}/groups/{grupo_id}/results", json={"result_numbers": RESULTADO})
    assert resposta.status_code == 201
    resultado = resposta.json()["data"]
    assert resultado["result_numbers"] == RESULTADO
    assert resultado["sync_source"] == "manual"
    assert resultado["matches"] == [
        {"bet_id": aposta_id, "matched_numbers": [42, 15, 4], "match_count": 3}
    ]


def test_resultado_invalido(client, novo_grupo):
    grupo_id = novo_grupo()

    resposta = client.post(f"{API}/groups/{grupo_id}/results", json={"result_numbers": [1, 2, 3]})
    assert resposta.status_code == 400
    assert client.get(f"{API}/groups/{grupo_id}/check").status_code == 404


def test_aposta_apos_resultado_e_conferida_na_hora(client, novo_grupo):
    grupo_id = novo_grupo()
    client.post(f"{API}/groups/{grupo_id}/results", json={"result_numbers": RESULTADO})

    aposta = _apostar(client, grupo_id, [4, 8, 15, 1, 2, 3]).json()["data"]
    assert aposta["auto_checked"] is True
    assert aposta["match_count"] == 3

    assert _acertos_por_aposta(client, grupo_id)[aposta["id"]]["match_count"] == 3


def test_alterar_e_excluir_aposta_reconfere(client, novo_grupo):
    grupo_id = novo_grupo()
    aposta_id = _apostar(client, grupo_id, [1, 2, 3, 5, 6, 7]).json()["data"]["id"]
    outra_id = _apostar(client, grupo_id, [4, 8, 1, 2, 3, 5]).json()["data"]["id"]
    client.post(f"{API}/groups/{grupo_id}/results", json={"result_numbers": RESULTADO})
    assert _acertos_por_aposta(client, grupo_id)[aposta_id]["match_count"] == 0

    resposta = client.put(f"{API}/groups/{grupo_id}/bets/{aposta_id}", json={"numbers": [4, 8, 15, 16, 23, 1]})
    assert resposta.status_code == 200
    assert _acertos_por_aposta(client, grupo_id)[aposta_id]["match_count"] == 5

    assert client.delete(f"{API}/groups/{grupo_id}/bets/{aposta_id}").status_code == 200
    acertos = _acertos_por_aposta(client, grupo_id)
    assert list(acertos) == [outra_id]
    assert acertos[outra_id]["match_count"] == 2


def test_aposta_de_outro_grupo(client, novo_grupo):
    grupo_id = novo_grupo()
    outro_grupo = novo_grupo(name="Outro")
    aposta_id = _apostar(client, grupo_id, [1, 2, 3, 4, 5, 6]).json()["data"]["id"]

    assert client.delete(f"{API}/groups/{outro_grupo}/bets/{aposta_id}").status_code == 404
    assert client.put(
        f"{API}/groups/{outro_grupo}/bets/{aposta_id}", json={"numbers": [1, 2, 3, 4, 5, 6]}
    ).status_code == 404


def test_resultado_vigente_e_o_mais_recente(client, novo_grupo):
    grupo_id = novo_grupo()
    client.post(f"{API}/groups/{grupo_id}/results", json={
        "result_numbers": [1, 2, 3, 4, 5, 6], "draw_date": "2026-11-21T20:00:00",
    })
    client.post(f"{API}/groups/{grupo_id}/results", json={
        "result_numbers": RESULTADO, "draw_date": "2026-11-20T20:00:00", "sync_source": "api",
    })

    conferencia = client.get(f"{API}/groups/{grupo_id}/check").json()["data"]
    assert conferencia["result_numbers"] == [1, 2, 3, 4, 5, 6]
    assert conferencia["group_name"] == "Bolão da Firma"
    assert conferencia["lottery_type"] == "mega-sena"
    assert conferencia["bets"] == []


def test_conferir_sem_resultado(client, novo_grupo):
    resposta = client.get(f"{API}/groups/{novo_grupo()}/check")
    assert resposta.status_code == 404
    assert resposta.json()["message"] == "Resultado para este grupo não encontrado"


def test_apostas_de_grupo_inexistente(client):
    assert client.get(f"{API}/groups/999/bets").status_code == 404
    assert _apostar(client, 999, [1, 2, 3, 4, 5, 6]).status_code == 404
