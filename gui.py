import os
import subprocess
import sys
import tkinter as tk
from tkinter import messagebox

from PIL import Image, ImageTk

from shell import NO_CONTENT_TEXT, Shell

LOGO_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "assets", "logo.png")


class TkShell(Shell):
    """
    Ventana tkinter: estado de la carga y botón para abrir la app con el navegador del sistema.
    """

    def __init__(self, loader, **kwargs):
        super().__init__(loader, **kwargs)
        self.root = tk.Tk()
        self.root.title(self.title)
        self.root.geometry("520x260")
        self.root.resizable(False, False)
        self.build_gui()

    def build_gui(self):
        # Logo
        if os.path.exists(LOGO_PATH):
            img = Image.open(LOGO_PATH).resize((90, 90))
            logo_img = ImageTk.PhotoImage(img)
            tk.Label(self.root, image=logo_img).pack(pady=10)
            self.root.logo_img = logo_img  # evita que lo borre el recolector de basura

        tk.Label(self.root, text=self.title, font=("Arial", 20, "bold")).pack()

        self.status_label = tk.Label(self.root, text="", font=("Arial", 10), fg="green",
                                     wraplength=480)
        self.status_label.pack(pady=8)

        self.entry_label = tk.Label(self.root, text=NO_CONTENT_TEXT, font=("Arial", 9),
                                    fg="gray", wraplength=480)
        self.entry_label.pack(pady=2)

        self.btn_open = tk.Button(
            self.root,
            text="▶ Open",
            command=self.open_entry,
            font=("Arial", 10, "bold"),
            state="disabled",
        )
        self.btn_open.pack(pady=(6, 10))

    def render(self, state):
        # Los suscriptores se llaman desde el hilo de carga; tkinter solo acepta el hilo principal.
        self.root.after(0, Shell.render, self, state)

    def show_status(self, text):
        self.status_label.config(text=text)

    def show_entry(self, entry_document):
        if entry_document is None:
            self.entry_label.config(text=NO_CONTENT_TEXT)
            self.btn_open.config(state="disabled")
        else:
            self.entry_label.config(text=str(entry_document))
            self.btn_open.config(state="normal")

    def open_entry(self):
        local_path = self.shown_entry
        if local_path is None or not local_path.exists():
            messagebox.showinfo("Not available", NO_CONTENT_TEXT)
            return
        try:
            if sys.platform == "win32":
                os.startfile(str(local_path))
            elif sys.platform == "darwin":
                subprocess.call(["open", str(local_path)])
            else:
                subprocess.call(["xdg-open", str(local_path)])
        except OSError as e:
            messagebox.showerror("Error", f"Could not open the file:\n{e}")

    def run(self):
        self.root.after(0, self.on_first_display)
        self.root.mainloop()
