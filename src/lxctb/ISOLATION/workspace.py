# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Scratch workspace holding the extracted template, with the host's pseudo
filesystems bind-mounted for the chroot phase.
"""

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import psutil

from ..RUNNERS.command_runner import CommandRunner

logger = logging.getLogger(__name__)

PSEUDO_FILESYSTEMS = ("proc", "sys", "dev")


@dataclass
class WorkspaceConfig:
    """Configuration for a scratch workspace."""

    parent_dir: Optional[str] = None  # None: the system temp dir
    prefix: str = "lxctb-"
    pseudo_filesystems: Tuple[str, ...] = PSEUDO_FILESYSTEMS


class ScratchWorkspace:
    """
    A unique temporary directory with a `rootfs/` subtree.

    Used as a context manager: on every exit path, normal, exception or
    interrupt, the pseudo filesystems are unmounted before the directory
    is removed.
    """

    def __init__(self, runner: CommandRunner, config: Optional[WorkspaceConfig] = None):
        """
        Initialize the workspace.

        Args:
            runner: Runner used for mount/umount.
            config: Workspace configuration.
        """
        self.runner = runner
        self.config = config or WorkspaceConfig()
        self.path: Optional[Path] = None
        self._mounted: List[str] = []

    @property
    def rootfs(self) -> Path:
        if self.path is None:
            raise RuntimeError("Workspace has not been created")
        return self.path / "rootfs"

    def create(self) -> Path:
        """
        Create the workspace directory.

        Returns:
            Path to the workspace.
        """
        self.path = Path(tempfile.mkdtemp(prefix=self.config.prefix, dir=self.config.parent_dir))
        self.rootfs.mkdir()
        logger.debug("Scratch workspace at %s", self.path)
        return self.path

    def __enter__(self) -> "ScratchWorkspace":
        self.create()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()

    def mount_pseudo_filesystems(self) -> None:
        """
        Bind-mount /proc, /sys and /dev from the host into the rootfs.
        """
        for name in self.config.pseudo_filesystems:
            target = self.rootfs / name
            target.mkdir(parents=True, exist_ok=True)
            self.runner.run(["mount", "--bind", f"/{name}", str(target)])
            self._mounted.append(str(target))

    def active_mounts(self) -> List[str]:
        """
        Mount points currently active below the workspace, deepest first.

        Returns:
            List of mount point paths.
        """
        if self.path is None:
            return []
        base = str(self.path) + os.sep
        mounts = [
            p.mountpoint for p in psutil.disk_partitions(all=True)
            if p.mountpoint.startswith(base)
        ]
        return sorted(set(mounts), key=len, reverse=True)

    def unmount_pseudo_filesystems(self) -> None:
        """
        Lazily unmount every pseudo filesystem this workspace mounted or that
        is still active below the rootfs. Failures are logged, not raised.
        """
        if self.path is None:
            return
        pseudo_targets = {str(self.rootfs / name) for name in self.config.pseudo_filesystems}
        targets = list(reversed(self._mounted))
        targets += [m for m in self.active_mounts() if m in pseudo_targets and m not in targets]

        for target in targets:
            result = self.runner.run(["umount", "-lf", target], check=False)
            if not result.ok:
                logger.warning("Failed to unmount %s", target)
        self._mounted = []

    def cleanup(self) -> None:
        """
        Unmount and delete the workspace. Safe to call more than once.
        """
        if self.path is None:
            return
        self.unmount_pseudo_filesystems()

        leftover = self.active_mounts()
        if leftover:
            # Deleting through a live bind mount would delete host files
            logger.error("Mounts still active below %s, not removing it: %s. "
                         "Unmount them and delete the directory by hand "
                         "(scratch workspaces live under LXCTB_WORK_DIR or the system temp dir).",
                         self.path, ", ".join(leftover))
            return

        try:
            shutil.rmtree(self.path)
        except OSError as e:
            logger.warning("Failed to remove workspace %s: %s", self.path, e)
        self.path = None
