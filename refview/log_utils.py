# log_utils.py -- Logging functions
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

"""Logging utilities for refview.

refview is used as a library by interactive front-ends, which usually do not
want log output on their terminal. The ``refview`` logger therefore carries a
no-op handler, so that nothing is printed until the application configures
logging itself.

Most modules only need :func:`getLogger`, which is re-exported here.
"""

import logging

getLogger = logging.getLogger


class _NullHandler(logging.Handler):
    """No-op logging handler to avoid unexpected logging warnings."""

    def emit(self, record: logging.LogRecord) -> None:
        pass


_NULL_HANDLER = _NullHandler()
_REFVIEW_LOGGER = getLogger("refview")
_REFVIEW_LOGGER.addHandler(_NULL_HANDLER)


def remove_null_handler() -> None:
    """Remove the null handler from the refview logger.

    Applications that attach their own handlers to the ``refview`` logger
    can call this to avoid the overhead of the null handler.
    """
    _REFVIEW_LOGGER.removeHandler(_NULL_HANDLER)
