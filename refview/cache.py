# cache.py -- Cached per-object ref lists
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

"""Cached lists of the refs pointing at an object.

Front-ends ask for the refs of the same commit over and over while drawing,
so lists are built once per object id and kept for the lifetime of the
store. A resynchronization compacts them in place: a list object handed out
earlier stays valid and simply loses the refs that moved away.
"""

from collections.abc import Iterator, Sequence
from typing import Union, overload

from .errors import RefAllocationError
from .refs import ObjectID, RefEntry
from .registry import RefRegistry


class RefList(Sequence[RefEntry]):
    """Sorted view of the refs pointing at one object id."""

    def __init__(self, registry: RefRegistry, sha: ObjectID, indices: list[int]) -> None:
        self.sha = sha
        self._registry = registry
        self._indices = indices

    def __len__(self) -> int:
        return len(self._indices)

    @overload
    def __getitem__(self, i: int) -> RefEntry: ...

    @overload
    def __getitem__(self, i: slice) -> list[RefEntry]: ...

    def __getitem__(self, i: Union[int, slice]) -> Union[RefEntry, list[RefEntry]]:
        if isinstance(i, slice):
            return [self._registry[index] for index in self._indices[i]]
        return self._registry[self._indices[i]]

    def __iter__(self) -> Iterator[RefEntry]:
        for index in self._indices:
            yield self._registry[index]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.sha!r}, {[ref.name for ref in self]!r})"

    def prune(self) -> int:
        """Drop refs that no longer point at this list's id.

        Survivors are re-sorted in place, since a resync may have changed
        their flags (e.g. which branch is checked out).

        Returns: Number of refs dropped
        """
        before = len(self._indices)
        # Slice assignment keeps the list object itself.
        self._indices[:] = [
            index for index in self._indices if self._registry[index].sha == self.sha
        ]
        self._indices.sort(key=self._registry.sort_key)
        return before - len(self._indices)


class RefListCache:
    """Lazily built ref lists, keyed by object id."""

    def __init__(self, registry: RefRegistry) -> None:
        self._registry = registry
        self._lists: dict[ObjectID, RefList] = {}

    def __contains__(self, sha: ObjectID) -> bool:
        return sha in self._lists

    def __len__(self) -> int:
        return len(self._lists)

    def get(self, sha: ObjectID) -> RefList:
        """Return the sorted list of refs pointing at sha.

        Lists are only cached once at least one ref matched; asking for an
        object without refs returns an empty, uncached list.
        """
        try:
            return self._lists[sha]
        except KeyError:
            pass
        if not sha:
            return RefList(self._registry, sha, [])
        indices = self._registry.matching(sha)
        if not indices:
            return RefList(self._registry, sha, [])
        indices.sort(key=self._registry.sort_key)
        try:
            ref_list = RefList(self._registry, sha, indices)
            self._lists[sha] = ref_list
        except MemoryError as e:
            raise RefAllocationError("the ref list cache") from e
        return ref_list

    def prune_all(self) -> int:
        """Compact every cached list after the registry was pruned.

        Returns: Total number of refs dropped from cached lists
        """
        return sum(ref_list.prune() for ref_list in self._lists.values())
