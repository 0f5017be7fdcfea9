# utils.py -- Utility functions common to refview tests
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

"""Utility functions common to refview tests."""

import shutil
import tempfile
from collections.abc import Iterator
from typing import Optional

from dulwich.objects import Commit, Tag, Tree
from dulwich.repo import Repo

from refview.refs import ObjectID, Ref
from refview.source import RefSource, parse_ref_listing

# 2010-01-01 00:00:00 UTC
DEFAULT_TIME = 1262304000


class ListRefSource(RefSource):
    """Ref source serving canned listings.

    Attributes:
      listing: Lines returned by the next call to list_refs
      head: Full ref returned by symbolic_head
      calls: Number of times list_refs was called
    """

    def __init__(self, listing: Optional[list[bytes]] = None, head: Ref = b"") -> None:
        self.listing = list(listing or [])
        self.head = head
        self.calls = 0
        self.head_calls = 0
        self.error: Optional[Exception] = None

    def symbolic_head(self, git_dir: str) -> Ref:
        self.head_calls += 1
        return self.head

    def list_refs(self, git_dir: str) -> Iterator[tuple[ObjectID, Ref]]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return parse_ref_listing(self.listing)


def init_repo(testcase) -> Repo:
    """Create an empty repository that is removed when the test ends."""
    path = tempfile.mkdtemp()
    testcase.addCleanup(shutil.rmtree, path)
    repo = Repo.init(path)
    testcase.addCleanup(repo.close)
    return repo


def make_commit(repo: Repo, message: bytes = b"Test commit") -> Commit:
    """Add a commit with an empty tree to the repository's object store."""
    tree = Tree()
    commit = Commit()
    commit.tree = tree.id
    commit.author = commit.committer = b"Test Author <test@nodomain.com>"
    commit.author_time = commit.commit_time = DEFAULT_TIME
    commit.author_timezone = commit.commit_timezone = 0
    commit.message = message
    repo.object_store.add_object(tree)
    repo.object_store.add_object(commit)
    return commit


def make_tag(repo: Repo, target: Commit, name: bytes) -> Tag:
    """Add an annotated tag for target to the repository's object store."""
    tag = Tag()
    tag.name = name
    tag.object = (Commit, target.id)
    tag.tagger = b"Test Tagger <test@nodomain.com>"
    tag.tag_time = DEFAULT_TIME
    tag.tag_timezone = 0
    tag.message = b"Tag " + name + b"\n"
    repo.object_store.add_object(tag)
    return tag
