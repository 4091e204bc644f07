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
Unpacking of base templates and repacking of customised root filesystems.
"""
import logging
import os
from pathlib import Path

from ..errors import UnsupportedArchiveError
from ..MODELS.distro_profile import Compression
from ..RUNNERS.command_runner import CommandRunner

logger = logging.getLogger(__name__)

TAR_CREATE = ["tar", "--numeric-owner", "--xattrs"]


def extract_archive(runner: CommandRunner, archive: Path, rootfs: Path) -> None:
    """
    Unpacks a base template into rootfs, dispatching on the file suffix.

    :param runner: Runner for tar/unzstd.
    :param archive: The .tar.zst or .tar.xz template.
    :param rootfs: Destination directory; created if missing.
    :raises UnsupportedArchiveError: For any other suffix.
    :raises DependencyError: If unzstd is needed but missing.
    """
    compression = Compression.from_path(str(archive))
    if compression is None:
        suffix = str(archive).rsplit(".", 1)[-1]
        raise UnsupportedArchiveError(f"Unsupported archive format: {suffix}")

    logger.info("Unpacking base template")
    os.makedirs(rootfs, exist_ok=True)

    if compression is Compression.ZSTD:
        runner.require("unzstd", "install zstd.")
        runner.pipe(["unzstd", "-c", "--", str(archive)],
                    ["tar", "-xpf", "-", "-C", str(rootfs)])
    else:
        runner.run(["tar", "-xpf", str(archive), "-C", str(rootfs)])


def repack_rootfs(runner: CommandRunner,
                  rootfs: Path,
                  output: Path,
                  compression: Compression) -> Path:
    """
    Archives the contents of rootfs (not the directory itself) with numeric
    ownership and xattrs, replacing any existing file at output.

    :param runner: Runner for tar and the compressor.
    :param rootfs: The customised tree.
    :param output: Destination archive path.
    :param compression: zstd (multi-threaded, level 19) or xz (-9).
    :return: The output path.
    """
    archive_cmd = [*TAR_CREATE, "-C", str(rootfs), "-c", "."]

    if compression is Compression.ZSTD:
        runner.require("zstd", "install zstd.")
    else:
        runner.require("xz", "install xz-utils.")

    if output.exists():
        output.unlink()

    if compression is Compression.ZSTD:
        runner.pipe(archive_cmd, ["zstd", "-T0", "-19", "-q", "-o", str(output)])
    else:
        runner.pipe(archive_cmd, ["xz", "-T0", "-9"], output_path=str(output))
    return output
