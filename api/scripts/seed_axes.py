#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Seed the six strategic axes into the configured storage backend.

Usage:
    DATA_SOURCE=mongodb MONGODB_URI=... python scripts/seed_axes.py
"""

import sys
import os
import logging

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import load_config, create_repository
from services.reference_data import seed_default_axes
from services.repository import RepositoryError

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def main():
    config = load_config()
    repository = create_repository(config)

    try:
        created = seed_default_axes(repository)
    except RepositoryError as e:
        logger.error(f"Failed to seed axes: {e.message}")
        sys.exit(1)

    logger.info(f"Axes seeded: {created} created ({config['DATA_SOURCE']})")


if __name__ == "__main__":
    main()
