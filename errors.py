# errors.py
# Errores de sincronización y arranque del cargador web offline.


class LoaderError(Exception):
    """
    Error base de todas las operaciones del cargador.
    """


class ManifestUnavailable(LoaderError):
    """
    No se pudo obtener o interpretar el listado remoto de archivos.
    """


class DownloadFailed(LoaderError):
    """
    Falló la descarga de un archivo concreto del manifiesto.
    """

    def __init__(self, path, reason=""):
        self.path = path
        self.reason = reason
        message = f"Failed downloading {path}."
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)


class SyncFailed(LoaderError):
    """
    La sincronización se abortó; el contenido local quedó intacto.
    """

    def __init__(self, cause):
        self.cause = cause
        super().__init__(str(cause) or cause.__class__.__name__)


class BootstrapFailed(LoaderError):
    """
    No se pudo sembrar el contenido local con la copia incluida en la aplicación.
    """
