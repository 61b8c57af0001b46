# loader.py
# Secuencia de carga en segundo plano y publicación del estado hacia la interfaz.

import logging
import threading

from errors import BootstrapFailed, LoaderError
from models import LoadState, SyncResult

logger = logging.getLogger(__name__)

INITIAL_STATUS = "Preparing web app..."


class StatusPublisher:
    """
    Un único escritor (la tarea de carga) y suscriptores que reciben cada LoadState.
    """

    def __init__(self, initial=None):
        self._lock = threading.Lock()
        self._state = initial or LoadState(INITIAL_STATUS)
        self._subscribers = []

    @property
    def state(self):
        with self._lock:
            return self._state

    def subscribe(self, callback):
        """
        Registra un suscriptor y le entrega de inmediato el estado actual.
        """
        with self._lock:
            self._subscribers.append(callback)
            state = self._state
        callback(state)

    def publish(self, status=None, entry_document=None, keep_entry=True):
        with self._lock:
            if keep_entry and entry_document is None:
                entry_document = self._state.entry_document
            state = LoadState(status if status is not None else self._state.status,
                              entry_document)
            self._state = state
            subscribers = list(self._subscribers)
        logger.info("Estado: %s", state.status)
        for callback in subscribers:
            callback(state)


class OneShot:
    """
    Bandera de arranque único: se activa la primera vez y nunca se reinicia.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._fired = False

    def claim(self):
        with self._lock:
            if self._fired:
                return False
            self._fired = True
            return True

    @property
    def fired(self):
        with self._lock:
            return self._fired


# Compartida por todo el proceso: una sola carga por ejecución de la aplicación.
LOAD_GUARD = OneShot()


class WebLoader:
    """
    Prepara el contenido local, intenta actualizarlo y publica qué mostrar.
    """

    def __init__(self, sync_manager, publisher=None, guard=None):
        self.sync_manager = sync_manager
        self.publisher = publisher or StatusPublisher()
        self.guard = guard or LOAD_GUARD
        self.thread = None

    def start_if_needed(self):
        """
        Lanza la carga en un hilo de fondo, solo la primera vez que se llama.
        """
        if not self.guard.claim():
            return False
        self.thread = threading.Thread(target=self.run, name="web-loader", daemon=True)
        self.thread.start()
        return True

    def _status(self, text):
        self.publisher.publish(status=text)

    def run(self):
        manager = self.sync_manager
        try:
            manager.ensure_local_content_exists()
            self.publisher.publish(entry_document=manager.resolve_entry_document())
        except BootstrapFailed as e:
            logger.error("No se pudo preparar el contenido local: %s", e)
            self._status(f"Failed to prepare local files: {e}")

        self._status("Checking internet...")
        online = manager.is_online()

        if online:
            self._status("Internet is available. Updating from GitHub...")
            try:
                result = manager.update(status_callback=self._status)
            except LoaderError as e:
                logger.error("Actualización fallida: %s", e)
                self._status(f"Update failed. Using local version. Error: {e}")
            else:
                if result is SyncResult.UPDATED:
                    self._status("Updated to latest web version.")
                else:
                    self._status("Already up to date.")
        else:
            self._status("Offline mode. Using local web version.")

        entry = manager.resolve_entry_document()
        if entry is not None:
            status = None if online else "Offline mode. Running cached version."
            self.publisher.publish(status=status, entry_document=entry)
        else:
            self.publisher.publish(status="No local version found.", keep_entry=False)
        return self.publisher.state
