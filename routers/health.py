import logging
from pathlib import Path

from fastapi import APIRouter, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from alembic.config import Config
from alembic.script import ScriptDirectory
from db import engine

logger = logging.getLogger("math-practice.health")

router = APIRouter(prefix="/health", tags=["health"])

_ALEMBIC_INI = Path(__file__).resolve().parent.parent / "alembic.ini"


@router.get("/db")
def health_db():
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"ok": True}
    except SQLAlchemyError as e:
        logger.error("db health check failed: %s", e)
        raise HTTPException(status_code=500, detail=f"db_error: {type(e).__name__}")


def _alembic_heads() -> list[str]:
    cfg = Config(str(_ALEMBIC_INI))
    cfg.set_main_option("script_location", str(_ALEMBIC_INI.parent / "alembic"))
    script = ScriptDirectory.from_config(cfg)
    return list(script.get_heads())


@router.get("/migrations")
def health_migrations():
    heads = _alembic_heads()
    db_ver = None

    try:
        with engine.connect() as conn:
            try:
                db_ver = conn.execute(
                    text("SELECT version_num FROM alembic_version")
                ).scalar_one_or_none()
            except SQLAlchemyError:
                # never migrated
                db_ver = None
    except SQLAlchemyError as e:
        logger.error("migration check could not connect: %s", e)
        return {
            "ok": False,
            "error": "db_connect_failed",
            "code_heads": heads,
            "db_version": db_ver,
        }

    synced = (db_ver in heads) if heads else False
    return {"ok": synced, "synced": synced, "db_version": db_ver, "code_heads": heads}
