"""
Commandes d'exploitation :

  portal-migrate       applique les migrations SQL en attente
  portal-qr-generate   génère un lot de stickers QR code à imprimer
"""

import logging

import click

from portal_maintenance.config import settings
from portal_maintenance.errors import AppError

logger = logging.getLogger(__name__)


def _setup_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s : %(message)s",
    )


@click.command()
@click.option("--dir", "migrations_dir", default=settings.MIGRATIONS_DIR, show_default=True,
              type=click.Path(file_okay=False), help="Répertoire des fichiers NNNN_nom.sql.")
@click.option("--database-url", default=settings.DATABASE_URL, show_default=False,
              help="URL de la base (défaut : DATABASE_URL).")
def migrate(migrations_dir: str, database_url: str) -> None:
    """Applique, dans l'ordre, les migrations SQL pas encore enregistrées."""
    from sqlalchemy import create_engine

    from portal_maintenance.migrate import run_migrations

    _setup_logging()
    engine = create_engine(database_url)
    try:
        ran = run_migrations(engine, migrations_dir)
    except AppError as exc:
        raise click.ClickException(str(exc))
    finally:
        engine.dispose()

    if ran:
        click.echo(f"{len(ran)} migration(s) appliquée(s) : {', '.join(ran)}")
    else:
        click.echo("Base à jour, aucune migration à appliquer.")


@click.command()
@click.option("--count", "-n", type=int, required=True, help="Nombre de stickers à générer.")
@click.option("--url", "base_url", default=settings.QR_BASE_URL, show_default=True,
              help="URL de base encodée dans les stickers.")
@click.option("--output", "output_dir", default=settings.QR_OUTPUT_DIR, show_default=True,
              type=click.Path(file_okay=False), help="Répertoire des images PNG.")
@click.option("--size", type=int, default=256, show_default=True, help="Taille des images en pixels.")
def generate_qr(count: int, base_url: str, output_dir: str, size: int) -> None:
    """Génère COUNT stickers disponibles : images PNG et lignes qr_codes."""
    from portal_maintenance.database import SessionLocal
    from portal_maintenance.services.qr_generation_service import generate_qr_codes

    _setup_logging()
    db = SessionLocal()
    try:
        codes = generate_qr_codes(db, count, base_url, output_dir, size=size)
    except AppError as exc:
        raise click.ClickException(str(exc))
    finally:
        db.close()

    click.echo(f"{len(codes)} QR code(s) générés dans {output_dir}")
