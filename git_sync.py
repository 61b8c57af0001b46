# git_sync.py
# Estrategia alternativa: mantener una copia de trabajo git del repositorio completo.

import logging
import shutil
import subprocess

import config
from errors import SyncFailed
from models import SyncResult
from sync_manager import BaseSyncManager

logger = logging.getLogger(__name__)


class GitSyncManager(BaseSyncManager):
    """
    Actualiza con ``git pull --ff-only``; si no hay copia aún, hace un clon superficial.

    Un pull que no sea fast-forward (cambios locales, historia divergente) falla
    y deja la copia de trabajo como estaba.
    """

    content_dir_name = "Repo"

    def __init__(self, repo_url=None, branch=config.BRANCH, git_executable="git", **kwargs):
        super().__init__(**kwargs)
        self.repo_url = repo_url or f"https://github.com/{config.REPO_OWNER}/{config.REPO_NAME}"
        self.branch = branch
        self.git_executable = git_executable

    def _run(self, *args, cwd=None):
        """
        Ejecuta un comando git y devuelve su salida; lanza SyncFailed si falla.
        """
        try:
            result = subprocess.run(
                [self.git_executable, *args],
                cwd=cwd,
                capture_output=True,
                text=True,
            )
        except OSError as e:
            raise SyncFailed(e) from e
        output = "\n".join([result.stdout, result.stderr]).strip()
        if result.returncode != 0:
            logger.error("git %s falló (%d): %s", args[0], result.returncode, output)
            raise SyncFailed(RuntimeError(output or "Unknown git error."))
        return result.stdout.strip()

    def has_working_copy(self):
        return (self.local_root / ".git").exists()

    def head_commit(self):
        return self._run("rev-parse", "HEAD", cwd=self.local_root)

    def pull(self):
        before = self.head_commit()
        self._run("pull", "--ff-only", cwd=self.local_root)
        after = self.head_commit()
        logger.info("git pull: %s -> %s", before, after)
        return SyncResult.UPDATED if after != before else SyncResult.UP_TO_DATE

    def clone(self):
        staging = None
        try:
            staging = self.new_staging_dir()
            self._run("clone", "--depth", "1", "--branch", self.branch,
                      self.repo_url, str(staging))
            self.promote(staging)
        except OSError as e:
            if staging is not None:
                shutil.rmtree(staging, ignore_errors=True)
            raise SyncFailed(e) from e
        except SyncFailed:
            if staging is not None:
                shutil.rmtree(staging, ignore_errors=True)
            raise
        logger.info("Repositorio clonado en %s", self.local_root)
        return SyncResult.UPDATED

    def update(self, status_callback=None):
        if self.has_working_copy():
            return self.pull()
        if status_callback:
            status_callback("Downloading repository...")
        return self.clone()
