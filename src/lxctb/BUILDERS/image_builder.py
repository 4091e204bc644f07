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
The template build pipeline: locate, extract, customise, repack, report.
"""
import logging
from pathlib import Path
from typing import Optional

from ..ISOLATION.workspace import ScratchWorkspace, WorkspaceConfig
from ..MODELS.build_config import BuildConfig
from ..REGISTRY.template_catalog import TemplateCatalog
from ..REGISTRY.template_locator import TemplateLocator
from ..RUNNERS.command_runner import CommandRunner
from ..UTILS.console import highlight
from .archive import extract_archive, repack_rootfs
from .customizer import ChrootCustomizer
from .reporter import report

logger = logging.getLogger(__name__)


class ImageBuilder:
    """
    Builds one customised container template from a resolved configuration.
    Stages run strictly in order; the first failure aborts the build and the
    scratch workspace is torn down on the way out.
    """
    def __init__(self,
                 runner: Optional[CommandRunner] = None,
                 workspace_config: Optional[WorkspaceConfig] = None):
        """
        Initializes the ImageBuilder.

        :param runner: Runner for every external command.
        :param workspace_config: Where and how scratch workspaces are created.
        """
        self.runner = runner or CommandRunner()
        self.workspace_config = workspace_config
        self.locator = TemplateLocator(TemplateCatalog(self.runner))

    def build(self, config: BuildConfig) -> Path:
        """
        Runs the pipeline.

        :param config: The resolved build configuration.
        :return: Path of the produced template archive.
        """
        reference = self.locator.locate(config)

        with ScratchWorkspace(self.runner, self.workspace_config) as workspace:
            extract_archive(self.runner, reference.path, workspace.rootfs)
            ChrootCustomizer(self.runner, workspace, config).run()

            logger.info("Packing template -> %s", highlight(config.output_filename))
            repack_rootfs(self.runner, workspace.rootfs, config.output_path,
                          config.profile.compression)

        report(config)
        return config.output_path
