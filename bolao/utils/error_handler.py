from fastapi import HTTPException
from datetime import datetime, timezone
from bolao.utils.exceptions_bolao import BolaoException
from bolao.utils.config_bolao import ConfigBolao
from . import utils
import pytz, sys, traceback

AMSP = pytz.timezone(ConfigBolao.TIMEZONE)

def handle_error(error, function):
    # Erros de regra de negócio seguem para o route handler sem virar 500
    if isinstance(error, (BolaoException, HTTPException)):
        raise error

    utc_dt = datetime.now(timezone.utc)
    dataErro = utc_dt.astimezone(AMSP)
    exc_type, exc_value, exc_traceback = sys.exc_info()
    filename = exc_traceback.tb_frame.f_code.co_filename if exc_traceback else "?"
    line_no = exc_traceback.tb_lineno if exc_traceback else 0
    utils.grava_error_arquivo({"error": f"""{traceback.format_exc()}""", "data": str(dataErro)})
    raise HTTPException(status_code=500, detail=f"Error in function {function.__name__} at {filename}:{line_no}: {str(error)}")
