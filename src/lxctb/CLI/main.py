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
Command Line Interface for LXCTB.
"""
import logging
import signal
from typing import Dict, Optional

import click

from ..BUILDERS.image_builder import ImageBuilder
from ..errors import BuildError
from ..ISOLATION.workspace import WorkspaceConfig
from ..MANAGERS.option_resolver import DEFAULT_TEMPLATE_LABEL, SSH_KEY_VAR, OptionResolver
from ..PARSERS.profile_parser import ProfileParser
from ..PARSERS.settings_parser import load_host_settings
from ..RUNNERS.command_runner import CommandRunner
from ..UTILS.console import configure_logging

logger = logging.getLogger(__name__)

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


def _terminate(signum, frame):
    # Turn SIGTERM into SystemExit so the workspace cleanup runs
    raise SystemExit(128 + signum)


def run_build(distro: str, options: Dict[str, Optional[str]]) -> None:
    """
    Resolves settings and options for a distro variant and runs the build.

    :param distro: Profile name, e.g. 'ubuntu'.
    :param options: Raw option values from the command line.
    """
    settings = load_host_settings()
    configure_logging(settings.log_level, settings.log_file)

    profile = ProfileParser().load(distro)
    config = OptionResolver(profile, settings).resolve(options)

    previous = signal.signal(signal.SIGTERM, _terminate)
    try:
        ImageBuilder(CommandRunner(), WorkspaceConfig(parent_dir=settings.work_dir)).build(config)
    finally:
        signal.signal(signal.SIGTERM, previous)


def variant_command(distro: str) -> click.Command:
    """
    Creates the build command for one distro variant. All variants share
    the same flags; only the defaults differ.
    """
    profile = ProfileParser().load(distro)
    ext = profile.output_suffix

    @click.command(name=distro, context_settings=CONTEXT_SETTINGS,
                   help=f"Build a customised {profile.display_name} LXC template ({ext}).")
    @click.option("--release", "-r", metavar="<ver>",
                  help=f"{profile.display_name} release (default: {profile.default_release})")
    @click.option("--template", "-t", metavar="<name>",
                  help=f"Template name/label (default: {DEFAULT_TEMPLATE_LABEL})")
    @click.option("--output", "-o", metavar="<file>",
                  help=f"Output filename ({ext} enforced)")
    @click.option("--ssh-key", "-k", "ssh_key", metavar="<key>", envvar=SSH_KEY_VAR,
                  help=f"Inject public key for root (or set ${SSH_KEY_VAR})")
    @click.option("--nameserver", "-n", metavar="<ip>",
                  help="DNS server used inside the chroot (default: host, else fallback)")
    @click.option("--cache-dir", "-c", "cache_dir", metavar="<dir>",
                  help="Where to write the customised template")
    @click.pass_context
    def command(ctx, **options):
        configure_logging()
        try:
            run_build(distro, options)
        except BuildError as e:
            logger.error("%s", e)
            ctx.exit(1)

    return command


@click.group(context_settings=CONTEXT_SETTINGS)
def cli():
    """
    LXCTB - build customised Proxmox VE LXC templates.
    """


ubuntu = variant_command("ubuntu")
fedora = variant_command("fedora")
cli.add_command(ubuntu)
cli.add_command(fedora)


def main():
    """
    Main entry point for the CLI.
    """
    cli()


def ubuntu_main():
    ubuntu(prog_name="build-lxc-ubuntu")


def fedora_main():
    fedora(prog_name="build-lxc-fedora")


if __name__ == '__main__':
    main()
