# SPDX-License-Identifier: Apache-2.0

"""
Static reference data loaded at setup time.
"""

import logging
from typing import List

from models.entities import Axis
from .repository import PlanningRepository

logger = logging.getLogger(__name__)

DEFAULT_AXES = [
    Axis(id="1", name="Governança e Gestão", color="blue"),
    Axis(id="2", name="Saúde e Qualidade de Vida", color="rose"),
    Axis(id="3", name="Educação, Cultura e Esporte", color="amber"),
    Axis(id="4", name="Desenvolvimento Econômico e Geração de Renda", color="emerald"),
    Axis(id="5", name="Infraestrutura e Mobilidade", color="slate"),
    Axis(id="6", name="Meio Ambiente e Sustentabilidade", color="green"),
]


def seed_default_axes(repository: PlanningRepository, axes: List[Axis] = None) -> int:
    """
    Store the strategic axes that are not present yet.

    Safe to run repeatedly; existing axes are left untouched.

    Returns:
        Number of axes created
    """
    existing_ids = set(axis.id for axis in repository.get_axes())
    created = 0

    for axis in axes or DEFAULT_AXES:
        if axis.id in existing_ids:
            logger.debug(f"Axis already present: {axis.name}")
            continue
        repository.create_axis(axis.model_copy())
        logger.info(f"Seeded axis: {axis.name}", extra={"axis_id": axis.id})
        created += 1

    return created
