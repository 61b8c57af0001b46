# gui_webview.py
# Ventana nativa con vista web incrustada (pywebview).

import html

import webview

from shell import NO_CONTENT_TEXT, Shell

PLACEHOLDER_HTML = """<!doctype html>
<html><body style="font-family: sans-serif; color: #666; display: flex;
align-items: center; justify-content: center; height: 90vh;">
<p>{text}</p></body></html>"""


class WebViewShell(Shell):
    """
    El estado va en el título de la ventana; el documento de entrada, en la vista web.
    """

    def __init__(self, loader, **kwargs):
        super().__init__(loader, **kwargs)
        self.window = webview.create_window(
            self.title,
            html=PLACEHOLDER_HTML.format(text=html.escape(loader.publisher.state.status)),
            width=1100,
            height=800,
            min_size=(640, 480),
        )

    def show_status(self, text):
        self.window.set_title(f"{self.title} | {text}")

    def show_entry(self, entry_document):
        if entry_document is None:
            self.window.load_html(PLACEHOLDER_HTML.format(text=html.escape(NO_CONTENT_TEXT)))
        else:
            self.window.load_url(entry_document.resolve().as_uri())

    def run(self):
        # webview.start bloquea; on_first_display corre en un hilo propio cuando la ventana existe.
        webview.start(self.on_first_display)
