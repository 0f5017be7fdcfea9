# registry.py -- In-memory registry of refs
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

"""The registry of every ref known to a store.

The registry is an append-only arena of :class:`RefEntry` objects. Entries
are addressed by their index, which never changes, so ref lists can hold
indices across resynchronizations. Entries are never removed; a ref that
disappears from the listing has its id blanked instead.
"""

from collections.abc import Callable, Iterator
from typing import Optional

from .errors import RefAllocationError
from .log_utils import getLogger
from .refs import ClassifiedRef, ObjectID, RefEntry, ref_sort_key

logger = getLogger(__name__)

RefVisitor = Callable[[RefEntry], Optional[bool]]


class RefRegistry:
    """Ordered collection of refs, keyed by ref identity."""

    def __init__(self) -> None:
        self._entries: list[RefEntry] = []
        self._order: list[int] = []
        self._by_identity: dict[tuple[bool, bytes], int] = {}
        self._head: Optional[int] = None

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> RefEntry:
        return self._entries[index]

    def __iter__(self) -> Iterator[RefEntry]:
        """Iterate over live refs in display order."""
        for index in self._order:
            entry = self._entries[index]
            if entry.sha:
                yield entry

    def lookup(self, classified: ClassifiedRef) -> Optional[int]:
        """Find the index of the entry sharing an identity with classified."""
        return self._by_identity.get(classified.identity)

    def upsert(self, classified: ClassifiedRef, sweep: bool = False) -> int:
        """Update the entry for a classified ref, adding one if necessary.

        During a sweep an annotated tag is listed twice, once for the tag
        object and once (with a ``^{}`` suffix) for the commit it points at.
        Whichever order the two lines arrive in, the peeled commit id is the
        one kept. Outside a sweep the latest id always wins.

        Args:
          classified: Classification of a listing line
          sweep: Whether the line is part of a full listing that started
            with :meth:`mark_all_stale`
        Returns: Index of the updated entry
        Raises:
          RefAllocationError: if the registry could not grow
        """
        index = self.lookup(classified)
        if index is None:
            index = len(self._entries)
            try:
                entry = RefEntry(classified.name)
                self._entries.append(entry)
                self._order.append(index)
                self._by_identity[classified.identity] = index
            except MemoryError as e:
                del self._entries[index:]
                if index in self._order:
                    self._order.remove(index)
                raise RefAllocationError("the ref registry") from e
        else:
            entry = self._entries[index]
            if (
                sweep
                and entry.valid
                and entry.is_tag
                and not entry.is_annotated
                and classified.is_annotated
            ):
                logger.debug("keeping peeled id %r for tag %r", entry.sha, entry.name)
                return index

        entry.update(classified)
        entry.valid = True
        if entry.is_head:
            self._head = index
        return index

    def mark_all_stale(self) -> None:
        """Flag every entry as unconfirmed before a new listing is read."""
        for entry in self._entries:
            entry.valid = False

    def prune_stale(self) -> int:
        """Blank the id of every entry not confirmed since the last sweep.

        Returns: Number of entries that were blanked
        """
        pruned = 0
        for index, entry in enumerate(self._entries):
            if entry.valid or not entry.sha:
                continue
            if entry.is_replace and self._by_identity.get(entry.identity) == index:
                # Replacement refs are keyed by their id, which is going away.
                del self._by_identity[entry.identity]
            entry.sha = b""
            pruned += 1
        return pruned

    def sort(self) -> None:
        """Restore display order over the whole registry."""
        self._order.sort(key=self.sort_key)

    def sort_key(self, index: int) -> tuple:
        """Display order key for the entry at index."""
        return ref_sort_key(self._entries[index])

    def matching(self, sha: ObjectID) -> list[int]:
        """Return indices of all entries currently pointing at sha."""
        return [i for i, entry in enumerate(self._entries) if entry.sha == sha]

    def foreach_ref(self, visitor: RefVisitor) -> None:
        """Call visitor for each live ref in display order.

        Iteration stops early when the visitor returns False.
        """
        for entry in self:
            if visitor(entry) is False:
                break

    @property
    def head(self) -> Optional[RefEntry]:
        """The checked out branch or detached HEAD, if known."""
        if self._head is None:
            return None
        return self._entries[self._head]

    def clear_head(self) -> None:
        self._head = None
