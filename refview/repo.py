# repo.py -- Repository settings consulted by the ref store
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

"""Repository settings consulted when loading refs."""

import os
from dataclasses import dataclass
from typing import Union

from dulwich.refs import HEADREF, LOCAL_BRANCH_PREFIX, parse_symref_value
from dulwich.repo import Repo

from .log_utils import getLogger

logger = getLogger(__name__)


@dataclass
class RepoState:
    """Settings of the repository whose refs are loaded.

    Attributes:
      git_dir: Path of the git control directory; empty if there is none
      remote: Tracked remote ref of the current branch, e.g. b"origin/master"
      head: Short name of the checked out branch; empty if unknown or detached
    """

    git_dir: str = ""
    remote: bytes = b""
    head: bytes = b""

    @classmethod
    def from_path(cls, path: Union[str, os.PathLike[str]]) -> "RepoState":
        """Read repository settings from the repository at path.

        Raises:
          NotGitRepository: if path is not a git repository
        """
        with Repo(path) as repo:
            state = cls(git_dir=repo.controldir())
            target = read_symbolic_head(repo)
            if target.startswith(LOCAL_BRANCH_PREFIX):
                state.head = target[len(LOCAL_BRANCH_PREFIX) :]
            if state.head:
                state.remote = _tracked_remote(repo, state.head)
        logger.debug("repository settings for %s: %r", path, state)
        return state


def read_symbolic_head(repo: Repo) -> bytes:
    """Return the full ref HEAD points at, or b"" if HEAD is detached."""
    contents = repo.refs.read_ref(HEADREF)
    if contents is None:
        return b""
    try:
        return parse_symref_value(contents)
    except ValueError:
        return b""


def _tracked_remote(repo: Repo, branch: bytes) -> bytes:
    config = repo.get_config()
    try:
        remote_name = config.get((b"branch", branch), b"remote")
        merge = config.get((b"branch", branch), b"merge")
    except KeyError:
        return b""
    if merge.startswith(LOCAL_BRANCH_PREFIX):
        merge = merge[len(LOCAL_BRANCH_PREFIX) :]
    return remote_name + b"/" + merge
