import json
import logging
import os
from bolao.utils.config_bolao import ConfigBolao

logger = logging.getLogger(__name__)

def grava_error_arquivo(dados: dict):
    """Acrescenta o erro (traceback + data) ao arquivo de log de erros"""
    logger.error(dados.get("error"))

    caminho = ConfigBolao.ERROR_LOG_FILE
    diretorio = os.path.dirname(caminho)
    if diretorio:
        os.makedirs(diretorio, exist_ok=True)

    with open(caminho, "a", encoding="utf-8") as arquivo:
        arquivo.write(json.dumps(dados, ensure_ascii=False) + "\n")
