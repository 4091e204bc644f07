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
Client for the Proxmox template catalog (pveam).
"""

import logging
from typing import List

from ..PARSERS.catalog_parser import CatalogParser
from ..RUNNERS.command_runner import CommandRunner

logger = logging.getLogger(__name__)


class TemplateCatalog:
    """
    Thin wrapper around the `pveam` CLI.
    """

    def __init__(self, runner: CommandRunner, tool: str = "pveam"):
        """
        Initialize the catalog client.

        Args:
            runner: Runner used to invoke pveam.
            tool: Name or path of the pveam binary.
        """
        self.runner = runner
        self.tool = tool

    def update(self) -> bool:
        """
        Refresh the catalog index. A failure is only a warning: locally
        cached templates may still satisfy the build.

        Returns:
            True if the refresh succeeded.
        """
        logger.info("Refreshing template catalogue")
        result = self.runner.run([self.tool, "update"], check=False)
        if not result.ok:
            logger.warning("pveam update failed - relying on local files")
        return result.ok

    def available(self) -> List[str]:
        """
        List the identifiers of all downloadable templates.

        Returns:
            Template identifiers, in catalog order.
        """
        result = self.runner.run([self.tool, "available"])
        return CatalogParser.parse_from_string(result.stdout)

    def download(self, storage: str, identifier: str) -> None:
        """
        Download a template into a storage's template cache.

        Args:
            storage: Proxmox storage id, e.g. 'local'.
            identifier: Catalog identifier of the template.
        """
        logger.info("Downloading %s to storage %s", identifier, storage)
        self.runner.run([self.tool, "download", storage, identifier], stream=True)
