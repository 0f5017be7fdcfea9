# errors.py -- Exception classes for refview
# Copyright (C) 2024 refview developers
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# refview is dual-licensed under the Apache License, Version 2.0 and the GNU
# General Public License as published by the Free Software Foundation; version 2.0
# or (at your option) any later version. You can redistribute it and/or
# modify it under the terms of either of these two licenses.
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# You should have received a copy of the licenses; if not, see
# <http://www.gnu.org/licenses/> for a copy of the GNU General Public License
# and <http://www.apache.org/licenses/LICENSE-2.0> for a copy of the Apache
# License, Version 2.0.
#

"""refview exception classes."""

from collections.abc import Sequence
from typing import Optional


class RefStoreError(Exception):
    """Base class for errors raised while maintaining the ref store."""


class RefAllocationError(RefStoreError):
    """Memory was exhausted while growing the registry or a ref list."""

    def __init__(self, what: str) -> None:
        """Initialize a RefAllocationError.

        Args:
            what: Description of the structure that could not grow.
        """
        self.what = what
        RefStoreError.__init__(self, f"Out of memory while growing {what}")


class RefSourceUnavailable(RefStoreError):
    """The external reference listing could not be obtained."""

    def __init__(
        self,
        argv: Sequence[str],
        returncode: Optional[int] = None,
        stderr: Optional[bytes] = None,
    ) -> None:
        """Initialize a RefSourceUnavailable exception.

        Args:
            argv: Command (or pseudo-command) that was attempted.
            returncode: Exit status, if the command ran at all.
            stderr: Error output of the command, if any.
        """
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        message = f"Unable to list refs with {' '.join(self.argv)!r}"
        if returncode is not None:
            message += f" (exit status {returncode})"
        if stderr:
            message += f": {stderr.decode('utf-8', 'replace').strip()}"
        RefStoreError.__init__(self, message)


class RefSyncError(RefStoreError):
    """A resynchronization was requested while one was in progress."""
