"""
Migrations SQL versionnées.

Les fichiers migrations/NNNN_nom.sql sont appliqués dans l'ordre des noms de fichier.
Chaque version appliquée est enregistrée dans schema_migrations : une version déjà
présente est ignorée. Un fichier = une transaction ; la première erreur arrête tout.
"""

import logging
from pathlib import Path

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from portal_maintenance.errors import TransportError

logger = logging.getLogger(__name__)

CREATE_MIGRATIONS_TABLE = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    version VARCHAR(255) PRIMARY KEY,
    applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
)
"""


def split_statements(sql: str) -> list[str]:
    """Découpe un fichier SQL en instructions (commentaires -- ignorés)."""
    lines = [line for line in sql.splitlines() if not line.strip().startswith("--")]
    return [statement.strip() for statement in "\n".join(lines).split(";") if statement.strip()]


def applied_versions(engine: Engine) -> set[str]:
    with engine.begin() as conn:
        conn.execute(text(CREATE_MIGRATIONS_TABLE))
        return set(conn.execute(text("SELECT version FROM schema_migrations")).scalars())


def migration_files(migrations_dir: str) -> list[Path]:
    return sorted(Path(migrations_dir).glob("*.sql"), key=lambda path: path.name)


def run_migrations(engine: Engine, migrations_dir: str) -> list[str]:
    """Applique les migrations en attente ; retourne les versions appliquées."""
    applied = applied_versions(engine)
    ran = []

    for path in migration_files(migrations_dir):
        version = path.stem
        if version in applied:
            logger.info("Migration %s déjà appliquée, ignorée", version)
            continue

        logger.info("Migration %s en cours", version)
        statements = split_statements(path.read_text(encoding="utf-8"))
        try:
            with engine.begin() as conn:
                for statement in statements:
                    conn.exec_driver_sql(statement)
                conn.execute(
                    text("INSERT INTO schema_migrations (version) VALUES (:version)"),
                    {"version": version},
                )
        except SQLAlchemyError as exc:
            logger.error("Échec de la migration %s : %s", version, exc)
            raise TransportError(f"Échec de la migration {version}.") from exc

        logger.info("Migration %s terminée", version)
        ran.append(version)

    return ran
