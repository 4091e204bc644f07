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
Customisation of an extracted template inside a chroot.
"""
import logging
import os
import shutil
from pathlib import Path

from ..ISOLATION.workspace import ScratchWorkspace
from ..MODELS.build_config import BuildConfig
from ..RUNNERS.command_runner import CommandRunner
from .customization_script import SCRIPT_NAME, STUB_RESOLV, CustomizationScript

logger = logging.getLogger(__name__)


class ChrootCustomizer:
    """
    Prepares the rootfs, runs the distro script in a chroot and removes
    everything it injected for that purpose.
    """
    def __init__(self, runner: CommandRunner, workspace: ScratchWorkspace, config: BuildConfig):
        """
        :param runner: Runner for chroot and mount commands.
        :param workspace: Workspace whose rootfs is customised.
        :param config: The resolved build configuration.
        """
        self.runner = runner
        self.workspace = workspace
        self.config = config
        self.script = CustomizationScript(config.profile)

    @property
    def rootfs(self) -> Path:
        return self.workspace.rootfs

    def write_nameserver_stub(self) -> Path:
        """
        Drops a resolver stub with a concrete nameserver where the script
        expects systemd-resolved's stub.

        :return: Host path of the stub file.
        """
        stub = self.rootfs / STUB_RESOLV.lstrip("/")
        stub.parent.mkdir(parents=True, exist_ok=True)
        stub.write_text(f"nameserver {self.config.nameserver}\n")
        return stub

    def write_script(self) -> Path:
        """
        :return: Host path of the rendered, executable script.
        """
        path = self.rootfs / SCRIPT_NAME
        path.write_text(self.script.render())
        os.chmod(path, 0o755)
        return path

    def remove_injected_files(self) -> None:
        """Removes the script and the resolver runtime dir from the rootfs."""
        script = self.rootfs / SCRIPT_NAME
        if script.exists():
            script.unlink()
        shutil.rmtree(self.rootfs / "run" / "systemd", ignore_errors=True)

    def run(self) -> None:
        """
        Runs the customisation. The pseudo filesystems are unmounted again
        whether or not the script succeeds.

        :raises CommandError: If the script fails inside the chroot.
        """
        self.write_script()
        self.write_nameserver_stub()

        self.workspace.mount_pseudo_filesystems()
        try:
            logger.info("Entering chroot to update & install packages")
            self.runner.run(
                ["chroot", str(self.rootfs), "/bin/bash", f"/{SCRIPT_NAME}"],
                env={"KEY": self.config.ssh_key},
                stream=True,
            )
            self.remove_injected_files()
        finally:
            self.workspace.unmount_pseudo_filesystems()
