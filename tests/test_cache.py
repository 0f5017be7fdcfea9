# test_cache.py -- tests for cache.py
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

"""Tests for refview.cache."""

from unittest import mock

from refview.cache import RefList, RefListCache
from refview.errors import RefAllocationError
from refview.refs import classify_ref
from refview.registry import RefRegistry

from . import TestCase


class RefListCacheTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.registry = RefRegistry()
        self.cache = RefListCache(self.registry)

    def add(self, sha: bytes, refname: bytes, head: bytes = b"") -> None:
        self.registry.upsert(classify_ref(sha, refname, b"origin/main", head))

    def test_get_sorted(self) -> None:
        self.add(b"aaaa", b"refs/remotes/origin/main")
        self.add(b"aaaa", b"refs/heads/topic")
        self.add(b"bbbb", b"refs/heads/other")
        self.add(b"aaaa", b"refs/tags/v1")
        ref_list = self.cache.get(b"aaaa")
        self.assertIsInstance(ref_list, RefList)
        self.assertEqual(b"aaaa", ref_list.sha)
        self.assertEqual([b"v1", b"origin/main", b"topic"], [r.name for r in ref_list])
        self.assertEqual(3, len(ref_list))
        self.assertEqual(b"v1", ref_list[0].name)
        self.assertEqual([b"origin/main", b"topic"], [r.name for r in ref_list[1:]])

    def test_get_is_cached(self) -> None:
        self.add(b"aaaa", b"refs/heads/main")
        ref_list = self.cache.get(b"aaaa")
        self.assertIs(ref_list, self.cache.get(b"aaaa"))
        self.assertIn(b"aaaa", self.cache)
        self.assertEqual(1, len(self.cache))

    def test_get_same_order_as_registry(self) -> None:
        for name in [b"zeta", b"alpha", b"main"]:
            self.add(b"aaaa", b"refs/heads/" + name, head=b"main")
        self.add(b"aaaa", b"refs/tags/v1^{}")
        self.registry.sort()
        self.assertEqual(list(self.registry), list(self.cache.get(b"aaaa")))

    def test_get_no_match(self) -> None:
        self.add(b"aaaa", b"refs/heads/main")
        ref_list = self.cache.get(b"cccc")
        self.assertEqual([], list(ref_list))
        self.assertNotIn(b"cccc", self.cache)
        self.add(b"cccc", b"refs/heads/later")
        self.assertEqual([b"later"], [r.name for r in self.cache.get(b"cccc")])

    def test_get_empty_id(self) -> None:
        self.add(b"aaaa", b"refs/heads/main")
        self.registry.mark_all_stale()
        self.registry.prune_stale()
        self.assertEqual([], list(self.cache.get(b"")))
        self.assertNotIn(b"", self.cache)

    def test_prune_all(self) -> None:
        self.add(b"aaaa", b"refs/heads/main")
        self.add(b"aaaa", b"refs/heads/moving")
        self.add(b"bbbb", b"refs/heads/other")
        at_a = self.cache.get(b"aaaa")
        at_b = self.cache.get(b"bbbb")
        self.registry.mark_all_stale()
        self.add(b"aaaa", b"refs/heads/main")
        self.add(b"cccc", b"refs/heads/moving")
        self.add(b"bbbb", b"refs/heads/other")
        self.registry.prune_stale()
        self.assertEqual(1, self.cache.prune_all())
        self.assertIs(at_a, self.cache.get(b"aaaa"))
        self.assertEqual([b"main"], [r.name for r in at_a])
        self.assertEqual([b"other"], [r.name for r in at_b])

    def test_prune_all_deleted_ref(self) -> None:
        self.add(b"aaaa", b"refs/heads/gone")
        at_a = self.cache.get(b"aaaa")
        self.registry.mark_all_stale()
        self.registry.prune_stale()
        self.cache.prune_all()
        self.assertEqual(0, len(at_a))
        self.assertIs(at_a, self.cache.get(b"aaaa"))

    def test_prune_all_resorts(self) -> None:
        self.add(b"aaaa", b"refs/heads/main", head=b"main")
        self.add(b"aaaa", b"refs/heads/alpha", head=b"main")
        at_a = self.cache.get(b"aaaa")
        self.assertEqual([b"main", b"alpha"], [r.name for r in at_a])
        self.registry.mark_all_stale()
        self.add(b"aaaa", b"refs/heads/main", head=b"alpha")
        self.add(b"aaaa", b"refs/heads/alpha", head=b"alpha")
        self.registry.prune_stale()
        self.cache.prune_all()
        self.assertEqual([b"alpha", b"main"], [r.name for r in at_a])

    def test_allocation_failure(self) -> None:
        self.add(b"aaaa", b"refs/heads/main")
        with mock.patch("refview.cache.RefList", side_effect=MemoryError):
            self.assertRaises(RefAllocationError, self.cache.get, b"aaaa")
        self.assertNotIn(b"aaaa", self.cache)
        self.assertEqual([b"main"], [r.name for r in self.cache.get(b"aaaa")])
