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
Final report of a build.
"""
import logging

import click

from ..MODELS.build_config import BuildConfig
from ..UTILS.console import highlight

logger = logging.getLogger(__name__)

CREATE_HINT = """\
{prefix} Create with:
    pct create <CTID> local:vztmpl/{filename} --storage local --ostype {ostype} \\
        --ssh-public-keys /root/.ssh/id_ed25519.pub"""


def report(config: BuildConfig) -> None:
    """
    Prints where the template landed and how to create a container from it.
    """
    logger.info("Template ready at: %s", highlight(config.output_path))
    click.echo(CREATE_HINT.format(prefix=click.style("[+]", fg="green"),
                                  filename=config.output_filename,
                                  ostype=config.profile.ostype))
