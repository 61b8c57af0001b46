# models.py
# Tipos de datos compartidos entre la sincronización y la interfaz.

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Tuple


@dataclass(frozen=True)
class RemoteFileEntry:
    """
    Un archivo (blob) o carpeta (tree) del repositorio remoto en una rama dada.
    """

    path: str
    kind: str
    content_hash: str


@dataclass(frozen=True)
class RemoteManifest:
    """
    Listado canónico (ordenado por ruta) de los archivos remotos a servir.
    """

    entries: Tuple[RemoteFileEntry, ...]

    @classmethod
    def from_entries(cls, entries: Iterable[RemoteFileEntry]) -> "RemoteManifest":
        return cls(tuple(sorted(entries, key=lambda entry: entry.path)))

    def signature(self) -> str:
        """
        Huella de todo el manifiesto: pares "ruta:hash" separados por saltos de línea.
        """
        return "\n".join(f"{entry.path}:{entry.content_hash}" for entry in self.entries)

    def __len__(self):
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)


class SyncResult(enum.Enum):
    UPDATED = "updated"
    UP_TO_DATE = "up_to_date"


@dataclass(frozen=True)
class LoadState:
    status: str
    entry_document: Optional[Path] = None
