# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for program readiness validation.
"""

from datetime import date
from domain.program_readiness import (
    MISSING_ACTION_ERROR, MISSING_INDICATOR_ERROR,
    group_by_parent, is_program_ready, validate_program_readiness
)
from models.entities import Action, Deliverable, Indicator


def make_indicator(program_id: str = "p1") -> Indicator:
    return Indicator(program_id=program_id, name="Taxa de alfabetização", target=95)


def make_action(action_id: str, name: str, program_id: str = "p1") -> Action:
    return Action(id=action_id, program_id=program_id, name=name)


def make_deliverable(action_id: str) -> Deliverable:
    return Deliverable(action_id=action_id, description="Entrega", delivery_date=date(2025, 3, 1), quantity=1)


class TestValidateProgramReadiness:
    """Test readiness rules."""

    def test_empty_program_reports_both_structural_errors(self):
        """Test that a program without indicators or actions gets two errors."""
        result = validate_program_readiness([], [], {})

        assert result.is_valid is False
        assert result.errors == [MISSING_INDICATOR_ERROR, MISSING_ACTION_ERROR]

    def test_action_without_deliverable_is_named(self):
        """Test one error for one indicator, one action and no deliverables."""
        action = make_action("a1", "Construir creche")

        result = validate_program_readiness([make_indicator()], [action], {})

        assert result.is_valid is False
        assert result.errors == ['Action "Construir creche" has no registered deliverables.']

    def test_valid_once_deliverable_added(self):
        """Test that adding the deliverable makes the program valid."""
        action = make_action("a1", "Construir creche")

        result = validate_program_readiness(
            [make_indicator()],
            [action],
            {"a1": [make_deliverable("a1")]}
        )

        assert result.is_valid is True
        assert result.errors == []

    def test_every_offending_action_reported(self):
        """Test that each action without deliverables gets its own error."""
        actions = [make_action("a1", "Primeira"), make_action("a2", "Segunda"), make_action("a3", "Terceira")]

        result = validate_program_readiness(
            [],
            actions,
            {"a2": [make_deliverable("a2")]}
        )

        assert result.errors == [
            MISSING_INDICATOR_ERROR,
            'Action "Primeira" has no registered deliverables.',
            'Action "Terceira" has no registered deliverables.',
        ]

    def test_empty_deliverable_list_counts_as_missing(self):
        """Test that an empty deliverable list is treated as missing."""
        result = validate_program_readiness([make_indicator()], [make_action("a1", "X")], {"a1": []})

        assert len(result.errors) == 1


class TestGroupedReadiness:
    """Test readiness over pre-grouped collections."""

    def test_group_by_parent(self):
        """Test grouping entities by parent id."""
        actions = [make_action("a1", "A", "p1"), make_action("a2", "B", "p2"), make_action("a3", "C", "p1")]

        grouped = group_by_parent(actions, "program_id")

        assert [a.id for a in grouped["p1"]] == ["a1", "a3"]
        assert [a.id for a in grouped["p2"]] == ["a2"]

    def test_is_program_ready(self):
        """Test readiness lookup per program id."""
        indicators = group_by_parent([make_indicator("p1"), make_indicator("p2")], "program_id")
        actions = group_by_parent([make_action("a1", "A", "p1"), make_action("a2", "B", "p2")], "program_id")
        deliverables = group_by_parent([make_deliverable("a1")], "action_id")

        assert is_program_ready("p1", indicators, actions, deliverables) is True
        assert is_program_ready("p2", indicators, actions, deliverables) is False
        assert is_program_ready("unknown", indicators, actions, deliverables) is False
