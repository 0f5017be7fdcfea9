#!/usr/bin/python3
# Setup file for refview
# Copyright (C) 2024 refview developers
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later

from setuptools import setup

setup(
    package_data={"refview": ["py.typed"]},
)
