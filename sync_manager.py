# sync_manager.py
# Lógica de sincronización entre el repositorio remoto y la copia local de la aplicación web.

import logging
import os
import shutil
import tempfile
from pathlib import Path, PurePosixPath
from urllib.parse import quote

import requests

import config
from errors import (
    BootstrapFailed,
    DownloadFailed,
    LoaderError,
    ManifestUnavailable,
    SyncFailed,
)
from models import RemoteFileEntry, RemoteManifest, SyncResult

logger = logging.getLogger(__name__)

PROGRESS_EVERY = 25


def is_web_file(path, entry_document=config.ENTRY_DOCUMENT, prefixes=config.ASSET_PREFIXES):
    """
    True si la ruta remota forma parte de la aplicación servida.
    """
    return path == entry_document or path.startswith(tuple(prefixes))


def is_safe_relative_path(path):
    """
    Rechaza rutas absolutas o con "..", que escaparían de la carpeta local.
    """
    pure = PurePosixPath(path)
    if not path or pure.is_absolute() or "\\" in path:
        return False
    return all(part not in ("", ".", "..") for part in path.split("/"))


class BaseSyncManager:
    """
    Parte común a ambas estrategias: conexión, carpeta local, semilla y promoción.

    La carpeta servida (``local_root``) solo se reemplaza entera mediante
    ``promote``; nunca se modifica archivo por archivo.
    """

    content_dir_name = "Web"

    def __init__(self, app_dir=None, bundled_dir=None, session=None,
                 entry_document=config.ENTRY_DOCUMENT, probe_url=config.PROBE_URL,
                 probe_timeout=config.PROBE_TIMEOUT):
        self.app_dir = Path(app_dir or config.APP_DIR)
        self.bundled_dir = Path(bundled_dir or config.BUNDLED_WEB_DIR)
        self.entry_document = entry_document
        self.probe_url = probe_url
        self.probe_timeout = probe_timeout
        self.local_root = self.app_dir / self.content_dir_name
        self.backup_root = self.app_dir / f"{self.content_dir_name}_backup"
        self.staging_prefix = f"{self.content_dir_name}-staging-"
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = config.USER_AGENT
        self.session = session

    def is_online(self):
        """
        Devuelve True si el host de referencia responde (incluso con error de cliente).
        """
        try:
            r = self.session.head(self.probe_url, timeout=self.probe_timeout,
                                  allow_redirects=False)
        except requests.RequestException as e:
            logger.info("Sin conexión (%s): %s", self.probe_url, e)
            return False
        online = 200 <= r.status_code < 500
        logger.info("Sonda de conexión %s -> %s", self.probe_url, r.status_code)
        return online

    def resolve_entry_document(self):
        """
        Ruta del documento de entrada dentro de la carpeta local, o None si no existe.
        """
        index = self.local_root / self.entry_document
        return index if index.is_file() else None

    def ensure_local_content_exists(self):
        """
        Siembra la carpeta local con la copia incluida si aún no tiene documento de entrada.

        Devuelve True si copió la semilla y False si ya había contenido.
        """
        try:
            self.app_dir.mkdir(parents=True, exist_ok=True)
            self.recover_interrupted_promotion()
        except OSError as e:
            raise BootstrapFailed(f"Could not prepare {self.app_dir}: {e}") from e

        if self.resolve_entry_document() is not None:
            return False

        if not (self.bundled_dir / self.entry_document).is_file():
            raise BootstrapFailed("Bundled Web resources were not found.")

        logger.info("Copiando contenido incluido desde %s", self.bundled_dir)
        staging = None
        try:
            staging = self.new_staging_dir()
            shutil.copytree(self.bundled_dir, staging, dirs_exist_ok=True)
            self.promote(staging)
        except OSError as e:
            if staging is not None:
                shutil.rmtree(staging, ignore_errors=True)
            raise BootstrapFailed(f"Could not copy bundled Web resources: {e}") from e
        try:
            self.forget_sync_state()
        except OSError as e:
            raise BootstrapFailed(f"Could not reset the sync signature: {e}") from e
        return True

    def recover_interrupted_promotion(self):
        """
        Limpia restos de una promoción interrumpida (por ejemplo, si la app se cerró a mitad).
        """
        for leftover in self.app_dir.glob(self.staging_prefix + "*"):
            logger.warning("Borrando carpeta temporal abandonada: %s", leftover)
            shutil.rmtree(leftover, ignore_errors=True)

        if not self.backup_root.exists():
            return
        if self.local_root.exists():
            logger.warning("Borrando respaldo abandonado: %s", self.backup_root)
            shutil.rmtree(self.backup_root)
        else:
            logger.warning("Restaurando respaldo de una promoción interrumpida")
            os.rename(self.backup_root, self.local_root)

    def new_staging_dir(self):
        # Misma carpeta que local_root: el rename de la promoción no cruza volúmenes.
        self.app_dir.mkdir(parents=True, exist_ok=True)
        return Path(tempfile.mkdtemp(prefix=self.staging_prefix, dir=self.app_dir))

    def promote(self, staged):
        """
        Reemplaza local_root por la carpeta preparada: o queda la vieja completa o la nueva.
        """
        if self.backup_root.exists():
            shutil.rmtree(self.backup_root)

        if self.local_root.exists():
            os.rename(self.local_root, self.backup_root)

        try:
            os.rename(staged, self.local_root)
        except OSError:
            logger.exception("Falló la promoción de %s, restaurando la versión anterior", staged)
            if self.local_root.exists():
                shutil.rmtree(self.local_root, ignore_errors=True)
            if self.backup_root.exists():
                os.rename(self.backup_root, self.local_root)
            raise

        # La nueva versión ya está en su lugar; un respaldo que no se pudo borrar
        # lo limpia recover_interrupted_promotion en el próximo arranque.
        try:
            if self.backup_root.exists():
                shutil.rmtree(self.backup_root)
        except OSError as e:
            logger.warning("No se pudo borrar el respaldo %s: %s", self.backup_root, e)
        logger.info("Contenido local reemplazado en %s", self.local_root)

    def forget_sync_state(self):
        """
        Se llama cuando local_root deja de corresponder a la última sincronización.
        """

    def update(self, status_callback=None):
        raise NotImplementedError


class SyncManager(BaseSyncManager):
    """
    Estrategia por listado: consulta la API de árbol de GitHub y descarga cada archivo.
    """

    def __init__(self, owner=config.REPO_OWNER, repo=config.REPO_NAME, branch=config.BRANCH,
                 asset_prefixes=config.ASSET_PREFIXES, api_base_url=config.API_BASE_URL,
                 raw_base_url=config.RAW_BASE_URL, manifest_timeout=config.MANIFEST_TIMEOUT,
                 download_timeout=config.DOWNLOAD_TIMEOUT, **kwargs):
        super().__init__(**kwargs)
        self.owner = owner
        self.repo = repo
        self.branch = branch
        self.asset_prefixes = tuple(asset_prefixes)
        self.api_base_url = api_base_url.rstrip("/")
        self.raw_base_url = raw_base_url.rstrip("/")
        self.manifest_timeout = manifest_timeout
        self.download_timeout = download_timeout
        self.signature_file = self.app_dir / "web_signature.txt"

    @property
    def tree_url(self):
        return f"{self.api_base_url}/repos/{self.owner}/{self.repo}/git/trees/{self.branch}"

    def raw_url(self, path):
        return f"{self.raw_base_url}/{self.owner}/{self.repo}/{self.branch}/{quote(path)}"

    def fetch_tree(self):
        """
        Obtiene el árbol completo (recursivo) de la rama desde la API.
        """
        try:
            r = self.session.get(
                self.tree_url,
                params={"recursive": "1"},
                headers={"Accept": "application/vnd.github+json"},
                timeout=self.manifest_timeout,
            )
            r.raise_for_status()
            payload = r.json()
        except requests.RequestException as e:
            raise ManifestUnavailable(f"GitHub API request failed: {e}") from e
        except ValueError as e:
            raise ManifestUnavailable(f"GitHub API returned invalid JSON: {e}") from e

        if not isinstance(payload, dict) or not isinstance(payload.get("tree"), list):
            raise ManifestUnavailable("GitHub API response has no tree listing.")
        if payload.get("truncated"):
            logger.warning("El listado de %s/%s está truncado, puede faltar contenido",
                           self.owner, self.repo)
        return payload["tree"]

    def fetch_manifest(self):
        """
        Devuelve el manifiesto canónico de los archivos web de la rama.
        """
        entries = []
        for item in self.fetch_tree():
            if not isinstance(item, dict) or not all(
                    isinstance(item.get(key), str) for key in ("path", "type", "sha")):
                raise ManifestUnavailable(f"Malformed tree entry: {item!r}")
            entry = RemoteFileEntry(path=item["path"], kind=item["type"],
                                    content_hash=item["sha"])
            if entry.kind != "blob" or not is_web_file(entry.path, self.entry_document,
                                                       self.asset_prefixes):
                continue
            if not is_safe_relative_path(entry.path):
                raise ManifestUnavailable(f"Unsafe path in tree listing: {entry.path!r}")
            entries.append(entry)

        if not entries:
            raise ManifestUnavailable("No web files were found in the repository.")
        manifest = RemoteManifest.from_entries(entries)
        logger.info("Manifiesto remoto: %d archivos", len(manifest))
        return manifest

    def read_signature(self):
        """
        Firma de la última sincronización aplicada, o None si nunca hubo una.
        """
        if not self.signature_file.exists():
            return None
        try:
            return self.signature_file.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning("No se pudo leer %s: %s", self.signature_file, e)
            return None

    def write_signature(self, signature):
        tmp = self.signature_file.with_name(self.signature_file.name + ".tmp")
        with open(tmp, "w", encoding="utf-8", newline="") as f:
            f.write(signature)
        os.replace(tmp, self.signature_file)

    def forget_sync_state(self):
        if self.signature_file.exists():
            self.signature_file.unlink()

    def download_file(self, path, dest):
        """
        Descarga un archivo del repositorio remoto a la ruta local indicada.
        """
        url = self.raw_url(path)
        logger.debug("Descargando %s", url)
        try:
            with self.session.get(url, stream=True, timeout=self.download_timeout) as r:
                r.raise_for_status()
                with open(dest, "wb") as f:
                    for chunk in r.iter_content(4096):
                        f.write(chunk)
        except requests.RequestException as e:
            raise DownloadFailed(path, str(e)) from e
        except OSError as e:
            raise DownloadFailed(path, str(e)) from e

    def sync(self, manifest, status_callback=None):
        """
        Aplica el manifiesto: descarga todo a una carpeta temporal y la promueve de una vez.
        """
        remote_signature = manifest.signature()
        if self.read_signature() == remote_signature:
            logger.info("Contenido local al día")
            return SyncResult.UP_TO_DATE

        staging = None
        total = len(manifest)
        try:
            staging = self.new_staging_dir()
            for index, entry in enumerate(manifest):
                if status_callback and index % PROGRESS_EVERY == 0:
                    status_callback(f"Downloading files {index + 1}/{total}...")
                dest = staging.joinpath(*entry.path.split("/"))
                dest.parent.mkdir(parents=True, exist_ok=True)
                self.download_file(entry.path, dest)
            self.promote(staging)
        except (LoaderError, OSError) as e:
            logger.error("Sincronización abortada: %s", e)
            if staging is not None:
                shutil.rmtree(staging, ignore_errors=True)
            raise SyncFailed(e) from e

        try:
            self.write_signature(remote_signature)
        except OSError as e:
            raise SyncFailed(e) from e
        logger.info("Sincronizados %d archivos", total)
        return SyncResult.UPDATED

    def update(self, status_callback=None):
        try:
            manifest = self.fetch_manifest()
        except ManifestUnavailable as e:
            raise SyncFailed(e) from e
        return self.sync(manifest, status_callback)
