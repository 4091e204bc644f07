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
Selection of the newest matching base template and resolution of a local
copy, downloading only when no cache has it.
"""

import logging
from pathlib import Path
from typing import List, Optional

from ..errors import BuildError, TemplateNotFoundError
from ..MODELS.build_config import BuildConfig, TemplateReference
from ..MODELS.distro_profile import Compression
from ..PARSERS.catalog_parser import CatalogParser
from ..UTILS.console import highlight
from ..UTILS.version_sort import latest
from .template_catalog import TemplateCatalog

logger = logging.getLogger(__name__)


def select_latest(identifiers: List[str], pattern: str, release: str) -> Optional[str]:
    """
    Pick the highest version among the identifiers matching the pattern.

    Args:
        identifiers: Catalog identifiers.
        pattern: Profile catalog pattern with a `{release}` placeholder.
        release: Target release.

    Returns:
        The newest match, or None.
    """
    return latest(CatalogParser.filter(identifiers, pattern, release))


class TemplateLocator:
    """
    Resolves the base template for a build.

    Lookup order for the archive itself: the platform's base cache, then the
    build's target cache, then a fresh download into the base cache.
    """

    def __init__(self, catalog: TemplateCatalog):
        self.catalog = catalog

    def resolve_identifier(self, config: BuildConfig) -> str:
        profile = config.profile
        self.catalog.update()
        identifier = select_latest(self.catalog.available(), profile.catalog_pattern, config.release)
        if not identifier:
            raise TemplateNotFoundError(f"{profile.display_name} {config.release} template not found.")
        return identifier

    def find_cached(self, config: BuildConfig, basename: str) -> Optional[Path]:
        for cache in (config.base_cache, config.cache_dir):
            candidate = Path(cache) / basename
            if candidate.is_file():
                return candidate
        return None

    def locate(self, config: BuildConfig) -> TemplateReference:
        """
        Find or fetch the newest base template for the configured release.

        Args:
            config: The resolved build configuration.

        Returns:
            Reference to a local copy of the template.
        """
        identifier = self.resolve_identifier(config)
        reference = TemplateReference(identifier=identifier, path=Path(identifier))
        logger.info("Using template %s (%s %s)", highlight(reference.display_name),
                    config.profile.display_name, config.release)

        path = self.find_cached(config, reference.basename)
        if path is None:
            self.catalog.download(config.storage, identifier)
            path = Path(config.base_cache) / reference.basename
            if not path.is_file():
                raise BuildError(f"Downloaded template not found at {path}")
        else:
            logger.info("Found cached template %s", highlight(path))

        return TemplateReference(identifier=identifier, path=path,
                                 compression=Compression.from_path(str(path)))
