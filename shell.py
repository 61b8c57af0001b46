# shell.py
# Interfaz común de las ventanas: muestran el estado y el documento de entrada.

import logging

import config

logger = logging.getLogger(__name__)

NO_CONTENT_TEXT = "No local web content available."


class Shell:
    """
    Vista pura: recibe LoadState y solo recarga el contenido si cambió la ruta.
    """

    def __init__(self, loader, title=config.APP_TITLE):
        self.loader = loader
        self.title = title
        self.shown_entry = None

    def render(self, state):
        self.show_status(state.status)
        if state.entry_document != self.shown_entry:
            self.shown_entry = state.entry_document
            logger.info("Mostrando %s", state.entry_document or "(sin contenido)")
            self.show_entry(state.entry_document)

    def on_first_display(self):
        self.loader.publisher.subscribe(self.render)
        self.loader.start_if_needed()

    def show_status(self, text):
        raise NotImplementedError

    def show_entry(self, entry_document):
        raise NotImplementedError

    def run(self):
        raise NotImplementedError


def create_shell(loader, backend=None):
    """
    Construye la ventana del backend configurado ("webview" o "tk").
    """
    backend = backend or config.GUI_BACKEND
    if backend == "webview":
        from gui_webview import WebViewShell
        return WebViewShell(loader)
    if backend == "tk":
        from gui import TkShell
        return TkShell(loader)
    raise ValueError(f"Unknown GUI backend: {backend!r}")
