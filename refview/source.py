# source.py -- Sources of ref listings
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

"""Sources of ref listings.

A source produces the authoritative list of refs of a repository as
``(sha, refname)`` pairs, in the order ``git ls-remote`` would print them,
and can tell which branch HEAD points at.
"""

import os
import shlex
import subprocess
from collections.abc import Iterable, Iterator, Sequence
from typing import Optional

from dulwich.errors import NotGitRepository
from dulwich.protocol import PEELED_TAG_SUFFIX
from dulwich.refs import HEADREF, LOCAL_TAG_PREFIX, Ref
from dulwich.repo import Repo

from .errors import RefSourceUnavailable
from .log_utils import getLogger
from .refs import ObjectID
from .repo import read_symbolic_head

logger = getLogger(__name__)

LS_REMOTE_ENV = "REFVIEW_LS_REMOTE"
SYMBOLIC_REF_ENV = "REFVIEW_SYMBOLIC_REF"


def parse_ref_listing(lines: Iterable[bytes]) -> Iterator[tuple[ObjectID, Ref]]:
    """Parse ``git ls-remote`` style output.

    Lines without a tab are passed through with an empty ref name rather
    than rejected; blank lines are skipped.

    Args:
      lines: Iterable over lines of ``<sha>\\t<refname>``
    Returns: Iterator over (sha, refname) tuples
    """
    for line in lines:
        line = line.rstrip(b"\r\n")
        if not line:
            continue
        sha, _, name = line.partition(b"\t")
        yield (sha, name)


def argv_from_env(name: str, default: Sequence[str]) -> list[str]:
    """Return the command line configured in an environment variable.

    Args:
      name: Name of the environment variable
      default: Command line to use if the variable is unset or empty
    Returns: List of arguments
    """
    value = os.environ.get(name)
    if not value:
        return list(default)
    return shlex.split(value)


class RefSource:
    """Base class for sources of ref listings."""

    def symbolic_head(self, git_dir: str) -> Ref:
        """Return the full ref HEAD points at, or b"" if HEAD is detached."""
        raise NotImplementedError(self.symbolic_head)

    def list_refs(self, git_dir: str) -> Iterator[tuple[ObjectID, Ref]]:
        """List all refs of the repository at git_dir.

        Failures are reported by this call, before any ref is consumed.

        Raises:
          RefSourceUnavailable: if the listing could not be obtained
        """
        raise NotImplementedError(self.list_refs)


class SubprocessRefSource(RefSource):
    """Ref source that runs git.

    The commands can be overridden with the REFVIEW_LS_REMOTE and
    REFVIEW_SYMBOLIC_REF environment variables. Overrides replace the whole
    command line, and are read once, the first time the source is used.
    """

    def __init__(self, git_command: str = "git") -> None:
        self.git_command = git_command
        self._ls_remote_argv: Optional[list[str]] = None
        self._symbolic_ref_argv: Optional[list[str]] = None

    def _init_argv(self, git_dir: str) -> tuple[list[str], list[str]]:
        if self._ls_remote_argv is None:
            self._ls_remote_argv = argv_from_env(LS_REMOTE_ENV, [])
        if self._symbolic_ref_argv is None:
            self._symbolic_ref_argv = argv_from_env(SYMBOLIC_REF_ENV, [])
        ls_remote = self._ls_remote_argv or [self.git_command, "ls-remote", git_dir]
        symbolic_ref = self._symbolic_ref_argv or [
            self.git_command,
            "--git-dir",
            git_dir,
            "symbolic-ref",
            "-q",
            HEADREF.decode("ascii"),
        ]
        return ls_remote, symbolic_ref

    def symbolic_head(self, git_dir: str) -> Ref:
        argv = self._init_argv(git_dir)[1]
        logger.debug("running %r", argv)
        try:
            p = subprocess.run(argv, capture_output=True, check=False)
        except OSError as e:
            logger.warning("unable to run %r: %s", argv, e)
            return b""
        if p.returncode != 0:
            # Detached HEAD, e.g. during a rebase.
            return b""
        return p.stdout.strip()

    def list_refs(self, git_dir: str) -> Iterator[tuple[ObjectID, Ref]]:
        argv = self._init_argv(git_dir)[0]
        logger.debug("running %r", argv)
        try:
            p = subprocess.run(argv, capture_output=True, check=False)
        except OSError as e:
            raise RefSourceUnavailable(argv) from e
        if p.returncode != 0:
            raise RefSourceUnavailable(argv, p.returncode, p.stderr)
        return parse_ref_listing(p.stdout.splitlines())


class DulwichRefSource(RefSource):
    """Ref source that reads the repository in-process with dulwich."""

    def _open(self, git_dir: str) -> Repo:
        try:
            return Repo(git_dir)
        except (NotGitRepository, OSError) as e:
            raise RefSourceUnavailable(["dulwich", git_dir]) from e

    def symbolic_head(self, git_dir: str) -> Ref:
        with self._open(git_dir) as repo:
            return read_symbolic_head(repo)

    def list_refs(self, git_dir: str) -> Iterator[tuple[ObjectID, Ref]]:
        with self._open(git_dir) as repo:
            listing = list(self._iter_refs(repo))
        return iter(listing)

    def _iter_refs(self, repo: Repo) -> Iterator[tuple[ObjectID, Ref]]:
        refs = repo.get_refs()
        if HEADREF in refs:
            yield (refs.pop(HEADREF), HEADREF)
        for name, sha in sorted(refs.items()):
            yield (sha, name)
            if not name.startswith(LOCAL_TAG_PREFIX):
                continue
            try:
                peeled = repo.get_peeled(name)
            except KeyError:
                logger.warning("unable to peel %r", name)
                continue
            if peeled != sha:
                yield (peeled, name + PEELED_TAG_SUFFIX)
