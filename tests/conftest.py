import os
import tempfile

# Configuração precisa existir antes de importar o pacote
_TMP = tempfile.mkdtemp(prefix="bolao-tests-")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP, "uploads")
os.environ["ERROR_LOG_FILE"] = os.path.join(_TMP, "logs", "erros.log")

import pytest
from fastapi.testclient import TestClient

from bolao.database.db import Base, engine
from server import app

API = "/api/v1"


@pytest.fixture(autouse=True)
def banco():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def novo_participante(client):
    contador = {"n": 0}

    def _criar(name: str = None, phone: str = None) -> int:
        contador["n"] += 1
        payload = {
            "name": name or f"Participante {contador['n']}",
            "phone": phone or f"1199999{contador['n']:04d}",
        }
        resposta = client.post(f"{API}/participants", json=payload)
        assert resposta.status_code == 201, resposta.text
        return resposta.json()["data"]["id"]

    return _criar


@pytest.fixture
def novo_grupo(client):
    def _criar(**campos) -> int:
        payload = {
            "name": "Bolão da Firma",
            "lottery_type": "mega-sena",
            "draw_date": "2026-11-20",
            "total_quotas": 10,
            "quota_value": 100.0,
            "pix_key": "bolao@exemplo.com",
        }
        payload.update(campos)
        resposta = client.post(f"{API}/groups", json=payload)
        assert resposta.status_code == 201, resposta.text
        return resposta.json()["data"]["id"]

    return _criar


@pytest.fixture
def adicionar_cota(client):
    def _adicionar(grupo_id: int, participante_id: int, quota_quantity: int = 1, people_per_quota: int = 1):
        return client.post(
            f"{API}/groups/{grupo_id}/participants",
            json={
                "participant_id": participante_id,
                "quota_quantity": quota_quantity,
                "people_per_quota": people_per_quota,
            },
        )

    return _adicionar


@pytest.fixture
def grupo_com_cotas(novo_grupo, novo_participante, adicionar_cota):
    """Grupo com duas cotas: valores individuais 100 (Ana) e 300 (Bruno)"""
    grupo_id = novo_grupo()
    ana = novo_participante("Ana", "11900000001")
    bruno = novo_participante("Bruno", "11900000002")
    assert adicionar_cota(grupo_id, ana, 1).status_code == 201
    assert adicionar_cota(grupo_id, bruno, 3).status_code == 201
    return {"grupo_id": grupo_id, "ana": ana, "bruno": bruno}
