# store.py -- Keeping the ref registry in sync with a repository
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

"""Keeping refs of a repository loaded, sorted and cached.

:class:`RefStore` owns the registry, the per-object ref list cache and the
HEAD slot of one repository. Loading refs is a strict pipeline: mark every
entry stale, ingest the listing, blank whatever was not confirmed, compact
the cached lists and finally re-sort the registry.
"""

import enum
from collections.abc import Iterable, Iterator
from typing import Optional

from dulwich.refs import LOCAL_BRANCH_PREFIX, Ref

from .cache import RefList, RefListCache
from .errors import RefSyncError
from .log_utils import getLogger
from .refs import ObjectID, RefEntry, classify_ref
from .registry import RefRegistry, RefVisitor
from .repo import RepoState
from .source import RefSource, SubprocessRefSource

logger = getLogger(__name__)


class SyncState(enum.Enum):
    """State of a store's resynchronization."""

    IDLE = "idle"
    SYNCING = "syncing"


class RefStore:
    """Refs of a single repository."""

    def __init__(
        self,
        repo: Optional[RepoState] = None,
        source: Optional[RefSource] = None,
    ) -> None:
        """Create a new, empty store.

        Args:
          repo: Repository settings; defaults to an empty RepoState
          source: Where ref listings come from; defaults to running git
        """
        self.repo = repo if repo is not None else RepoState()
        self.source = source if source is not None else SubprocessRefSource()
        self.registry = RefRegistry()
        self.ref_lists = RefListCache(self.registry)
        self.state = SyncState.IDLE
        self._loaded = False

    @property
    def loaded(self) -> bool:
        """Whether refs have been loaded successfully at least once."""
        return self._loaded

    def load(self, force: bool = False) -> None:
        """Load refs, unless they were loaded before.

        Args:
          force: Reload even if refs were loaded before, and look up which
            branch is checked out again
        Raises:
          RefSourceUnavailable: if the ref listing could not be obtained
          RefAllocationError: if memory ran out while storing refs
          RefSyncError: if called while a load is in progress
        """
        if self.state is SyncState.SYNCING:
            raise RefSyncError("refs are already being loaded")
        if force:
            self.repo.head = b""
        elif self._loaded:
            return
        self.state = SyncState.SYNCING
        try:
            self._reload()
        finally:
            self.state = SyncState.IDLE
        self._loaded = True

    def _reload(self) -> None:
        repo = self.repo
        if not repo.git_dir:
            return

        if not repo.head:
            head = self.source.symbolic_head(repo.git_dir)
            if head.startswith(LOCAL_BRANCH_PREFIX):
                head = head[len(LOCAL_BRANCH_PREFIX) :]
            repo.head = head

        logger.debug("loading refs from %s (head %r)", repo.git_dir, repo.head)
        listing = self.source.list_refs(repo.git_dir)

        self.registry.clear_head()
        self.registry.mark_all_stale()
        self._ingest(listing)

        pruned = self.registry.prune_stale()
        dropped = self.ref_lists.prune_all()
        self.registry.sort()
        logger.debug(
            "loaded %d refs, %d stale, %d dropped from cached lists",
            len(self.registry),
            pruned,
            dropped,
        )

    def _ingest(self, listing: Iterable[tuple[ObjectID, Ref]]) -> None:
        for sha, refname in listing:
            self._add(sha, refname, self.repo.remote, self.repo.head, sweep=True)

    def _add(
        self,
        sha: ObjectID,
        refname: Ref,
        remote: bytes,
        head: bytes,
        sweep: bool = False,
    ) -> None:
        classified = classify_ref(sha, refname, remote, head)
        if classified is None:
            return
        self.registry.upsert(classified, sweep=sweep)

    def add_ref(
        self,
        sha: ObjectID,
        refname: Ref,
        remote: Optional[bytes] = None,
        head: Optional[bytes] = None,
    ) -> None:
        """Add or update a single ref without a full reload.

        Cached ref lists are not updated until the next load.

        Args:
          sha: Object id the ref points at
          refname: Full name of the ref
          remote: Tracked remote ref; defaults to the repository's
          head: Checked out branch; defaults to the repository's
        """
        self._add(
            sha,
            refname,
            self.repo.remote if remote is None else remote,
            self.repo.head if head is None else head,
        )

    def __iter__(self) -> Iterator[RefEntry]:
        return iter(self.registry)

    def foreach_ref(self, visitor: RefVisitor) -> None:
        """Visit live refs in display order until visitor returns False."""
        self.registry.foreach_ref(visitor)

    @property
    def head(self) -> Optional[RefEntry]:
        """The checked out branch, or a detached HEAD; None if unknown."""
        return self.registry.head

    def get_ref_list(self, sha: ObjectID) -> RefList:
        """Return the sorted refs pointing at sha."""
        return self.ref_lists.get(sha)
