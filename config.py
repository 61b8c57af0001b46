# config.py
# Configuración del cargador web offline. Cada valor se puede sobrescribir con
# una variable de entorno para apuntar a otro repositorio.

import os
import sys
from pathlib import Path

APP_NAME = "OfflineWebLoader"
APP_TITLE = os.getenv("LOADER_APP_TITLE", "Knights and Castles")
USER_AGENT = "OfflineWebLoader"

REPO_OWNER = os.getenv("LOADER_REPO_OWNER", "markovluka-prog")
REPO_NAME = os.getenv("LOADER_REPO_NAME", "KnightsAndCastles")
BRANCH = os.getenv("LOADER_BRANCH", "main")

API_BASE_URL = "https://api.github.com"
RAW_BASE_URL = "https://raw.githubusercontent.com"
PROBE_URL = "https://github.com"

PROBE_TIMEOUT = 5
MANIFEST_TIMEOUT = 20
DOWNLOAD_TIMEOUT = 30

ENTRY_DOCUMENT = "index.html"
ASSET_PREFIXES = ("assets/", "public/")

# "api": descarga archivo por archivo según la API de árbol. "clone": copia de trabajo git.
STRATEGY = os.getenv("LOADER_STRATEGY", "api")
# "webview": página incrustada. "tk": ventana de estado que abre la página afuera.
GUI_BACKEND = os.getenv("LOADER_GUI", "webview")
LOG_LEVEL = os.getenv("LOADER_LOG_LEVEL", "INFO")


def default_app_dir():
    """
    Devuelve el directorio privado de la aplicación según la plataforma.
    """
    if sys.platform == "win32":
        base = os.getenv("LOCALAPPDATA") or os.path.join(Path.home(), "AppData", "Local")
    elif sys.platform == "darwin":
        base = os.path.join(Path.home(), "Library", "Application Support")
    else:
        base = os.getenv("XDG_DATA_HOME") or os.path.join(Path.home(), ".local", "share")
    return Path(base) / APP_NAME


APP_DIR = Path(os.getenv("LOADER_APP_DIR") or default_app_dir())
BUNDLED_WEB_DIR = Path(
    os.getenv("LOADER_BUNDLED_WEB_DIR") or Path(__file__).resolve().parent / "web"
)
