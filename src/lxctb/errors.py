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
Exception hierarchy for template builds.
"""
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .RUNNERS.command_runner import CmdResult


class BuildError(RuntimeError):
    """Base class for every fatal build failure."""


class ConfigurationError(BuildError):
    """Raised when options, settings or profiles cannot be resolved."""


class DependencyError(BuildError):
    """Raised when a required external tool is not installed on the host."""


class TemplateNotFoundError(BuildError):
    """Raised when the catalog has no template matching the requested release."""


class UnsupportedArchiveError(BuildError):
    """Raised for base templates that are neither .tar.xz nor .tar.zst."""


class CommandError(BuildError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, message: str, result: Optional["CmdResult"] = None):
        super().__init__(message)
        self.result = result

