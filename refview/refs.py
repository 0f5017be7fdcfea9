# refs.py -- Reference entities and classification
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

"""Reference entities, classification of ref names and ref ordering."""

import enum
from collections.abc import Callable
from typing import NamedTuple, Optional

from dulwich.protocol import PEELED_TAG_SUFFIX
from dulwich.refs import (
    HEADREF,
    LOCAL_BRANCH_PREFIX,
    LOCAL_REMOTE_PREFIX,
    LOCAL_REPLACE_PREFIX,
    LOCAL_TAG_PREFIX,
    Ref,
)

ObjectID = bytes

# Display name shared by every replacement ref.
REPLACED_NAME = b"replaced"


class RefKind(enum.Enum):
    """Kind of reference, as determined from its full name."""

    TAG = "tag"
    PEELED_TAG = "peeled-tag"
    REMOTE = "remote"
    REPLACE = "replace"
    BRANCH = "branch"
    DETACHED_HEAD = "detached-head"
    OTHER = "other"


class ClassifiedRef(NamedTuple):
    """Result of classifying a single listing line.

    Attributes:
      kind: The kind of reference
      name: Short display name
      sha: Object id the entry should point at
      tracked: Whether this is the tracked remote ref
      head: Whether this is the checked out branch or a detached HEAD
      replacement: For replacement refs, id of the replacing object
    """

    kind: RefKind
    name: bytes
    sha: ObjectID
    tracked: bool = False
    head: bool = False
    replacement: Optional[ObjectID] = None

    @property
    def is_tag(self) -> bool:
        return self.kind in (RefKind.TAG, RefKind.PEELED_TAG)

    @property
    def is_annotated(self) -> bool:
        return self.kind is RefKind.TAG

    @property
    def is_remote(self) -> bool:
        return self.kind is RefKind.REMOTE

    @property
    def is_replace(self) -> bool:
        return self.kind is RefKind.REPLACE

    @property
    def identity(self) -> tuple[bool, bytes]:
        """Key used to decide whether this updates an existing entry.

        Replacement refs all share one display name, so they are keyed by
        the object they replace instead.
        """
        if self.is_replace:
            return (True, self.sha)
        return (False, self.name)


class RefEntry:
    """A reference known to the registry.

    Entries are owned by the registry and shared read-only with every ref
    list. A stale entry keeps its slot and has its ``sha`` blanked.
    """

    __slots__ = (
        "is_annotated",
        "is_head",
        "is_remote",
        "is_replace",
        "is_tag",
        "is_tracked",
        "name",
        "replacement",
        "sha",
        "valid",
    )

    def __init__(self, name: bytes, sha: ObjectID = b"") -> None:
        self.name = name
        self.sha = sha
        self.is_tag = False
        self.is_annotated = False
        self.is_remote = False
        self.is_replace = False
        self.is_tracked = False
        self.is_head = False
        self.replacement: Optional[ObjectID] = None
        self.valid = False

    @property
    def identity(self) -> tuple[bool, bytes]:
        """Identity key, see :attr:`ClassifiedRef.identity`."""
        if self.is_replace:
            return (True, self.sha)
        return (False, self.name)

    def update(self, classified: ClassifiedRef) -> None:
        """Overwrite flags and id with a fresh classification."""
        self.sha = classified.sha
        self.is_tag = classified.is_tag
        self.is_annotated = classified.is_annotated
        self.is_remote = classified.is_remote
        self.is_replace = classified.is_replace
        self.is_tracked = classified.tracked
        self.is_head = classified.head
        self.replacement = classified.replacement

    def __repr__(self) -> str:
        flags = [
            flag
            for flag in ("tag", "annotated", "head", "tracked", "replace", "remote")
            if getattr(self, "is_" + flag)
        ]
        return f"{type(self).__name__}({self.name!r}, {self.sha!r}, flags={flags!r})"


def ref_sort_key(ref: RefEntry) -> tuple[bool, bool, bool, bool, bool, bool, bytes]:
    """Sort key giving the display order of refs.

    Tags come first, then annotated tags, the checked out head, the tracked
    remote ref and replacement refs. Remote refs are ordered last; ties are
    broken by name.
    """
    return (
        not ref.is_tag,
        not ref.is_annotated,
        not ref.is_head,
        not ref.is_tracked,
        not ref.is_replace,
        ref.is_remote,
        ref.name,
    )


def compare_refs(ref1: RefEntry, ref2: RefEntry) -> int:
    """Three-way comparison consistent with :func:`ref_sort_key`."""
    key1 = ref_sort_key(ref1)
    key2 = ref_sort_key(ref2)
    return (key1 > key2) - (key1 < key2)


def _classify_tag(
    sha: ObjectID, name: bytes, remote: bytes, head: bytes
) -> ClassifiedRef:
    if name.endswith(PEELED_TAG_SUFFIX):
        return ClassifiedRef(RefKind.PEELED_TAG, name[: -len(PEELED_TAG_SUFFIX)], sha)
    return ClassifiedRef(RefKind.TAG, name, sha)


def _classify_remote(
    sha: ObjectID, name: bytes, remote: bytes, head: bytes
) -> ClassifiedRef:
    return ClassifiedRef(RefKind.REMOTE, name, sha, tracked=(name == remote))


def _classify_replace(
    sha: ObjectID, name: bytes, remote: bytes, head: bytes
) -> ClassifiedRef:
    # The replaced object is the identity; the listed id is what replaces it.
    return ClassifiedRef(RefKind.REPLACE, REPLACED_NAME, name, replacement=sha)


def _classify_branch(
    sha: ObjectID, name: bytes, remote: bytes, head: bytes
) -> ClassifiedRef:
    return ClassifiedRef(RefKind.BRANCH, name, sha, head=(name == head))


RuleHandler = Callable[[ObjectID, bytes, bytes, bytes], ClassifiedRef]

# Prefix rules in priority order. Handlers receive the name with the prefix
# already stripped.
REF_RULES: tuple[tuple[bytes, RuleHandler], ...] = (
    (LOCAL_TAG_PREFIX, _classify_tag),
    (LOCAL_REMOTE_PREFIX, _classify_remote),
    (LOCAL_REPLACE_PREFIX, _classify_replace),
    (LOCAL_BRANCH_PREFIX, _classify_branch),
)


def classify_ref(
    sha: ObjectID, refname: Ref, remote: bytes = b"", head: bytes = b""
) -> Optional[ClassifiedRef]:
    """Classify a ref as listed by ``git ls-remote``.

    Args:
      sha: Object id from the listing
      refname: Full ref name from the listing
      remote: Name of the tracked remote ref, e.g. b"origin/master"
      head: Short name of the checked out branch, empty if detached
    Returns: A ClassifiedRef, or None if the line should be ignored
    """
    for prefix, handler in REF_RULES:
        if refname.startswith(prefix):
            return handler(sha, refname[len(prefix) :], remote, head)
    if refname == HEADREF:
        # HEAD is only listed separately when it is not a symbolic ref,
        # e.g. during a rebase.
        if head:
            return None
        return ClassifiedRef(RefKind.DETACHED_HEAD, refname, sha, head=True)
    return ClassifiedRef(RefKind.OTHER, refname, sha)
