# app.py
# Punto de entrada principal del cargador web offline

import logging
import sys

import config
from git_sync import GitSyncManager
from loader import WebLoader
from shell import create_shell
from sync_manager import SyncManager

logger = logging.getLogger(__name__)


def configure_logging(app_dir=config.APP_DIR, level=config.LOG_LEVEL):
    """
    Registra en <app_dir>/loader.log y en stderr.
    """
    handlers = [logging.StreamHandler()]
    try:
        app_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(app_dir / "loader.log", encoding="utf-8"))
    except OSError as e:
        print(f"No se pudo abrir el log en {app_dir}: {e}", file=sys.stderr)
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
    )


def create_sync_manager(strategy=None):
    """
    Elige la estrategia de sincronización configurada ("api" o "clone").
    """
    strategy = strategy or config.STRATEGY
    if strategy == "api":
        return SyncManager()
    if strategy == "clone":
        return GitSyncManager()
    raise ValueError(f"Unknown sync strategy: {strategy!r}")


def main():
    configure_logging()
    logger.info("Iniciando %s (estrategia=%s, gui=%s)", config.APP_NAME, config.STRATEGY,
                config.GUI_BACKEND)
    # Instancia el manejador de sincronización (archivos y lógica)
    sync_manager = create_sync_manager()
    loader = WebLoader(sync_manager)
    # Inicia la interfaz gráfica; la carga arranca al mostrarse la ventana
    create_shell(loader).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
