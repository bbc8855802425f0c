"""FastAPI app exposing the validation router.

Run with ``uvicorn restake_validator.validation_app:app``.
"""

import os
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from fastapi import FastAPI

from restake_validator.api.validation_api import router as validation_router
from restake_validator.core.logging import configure_console_log

ROOT_DIR = Path(__file__).resolve().parents[1]

_found_env = find_dotenv(usecwd=True)
if _found_env:
    load_dotenv(_found_env, override=False)
elif (ROOT_DIR / ".env").exists():
    load_dotenv(ROOT_DIR / ".env", override=False)

configure_console_log(debug=os.getenv("RESTAKE_VALIDATOR_DEBUG") == "1")

app = FastAPI(title="Restake Validator API", version="v1")
app.include_router(validation_router)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
