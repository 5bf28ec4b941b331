# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for the status automation service.
"""

from datetime import date, timedelta
from unittest.mock import Mock

from models.entities import Action
from models.enums import ActionStatus
from services.automation import StatusAutomationService
from services.repository import ACTIONS, RepositoryError


class TestStatusAutomationService:
    """Test automation runs against a repository."""

    def test_run_persists_changes(self, repository, program, today):
        """Test that overdue actions are stored as delayed."""
        repository.create_action(Action(
            id="late", program_id=program.id, name="Atrasada",
            status=ActionStatus.NOT_STARTED, end_date=today - timedelta(days=1)
        ))
        repository.create_action(Action(
            id="extended", program_id=program.id, name="Prorrogada",
            status=ActionStatus.DELAYED, end_date=today
        ))
        repository.create_action(Action(
            id="done", program_id=program.id, name="Concluída",
            status=ActionStatus.COMPLETED, end_date=today - timedelta(days=10)
        ))

        result = StatusAutomationService(repository).run(today)

        assert result.updated_count == 2
        assert result.error is None
        assert result.reference_date == today
        assert repository.get_action("late").status == "delayed"
        assert repository.get_action("extended").status == "in_progress"
        assert repository.get_action("done").status == "completed"

    def test_invalid_stored_action_does_not_block_run(self, repository, program, today):
        """Test that a legacy row with an unknown status is skipped."""
        repository.create_action(Action(
            id="late", program_id=program.id, name="Atrasada",
            status=ActionStatus.NOT_STARTED, end_date=today - timedelta(days=1)
        ))
        legacy = Action(program_id=program.id, name="Cancelada", end_date=today - timedelta(days=1)).to_document()
        legacy["status"] = "cancelled"
        repository._insert(ACTIONS, "legacy", legacy)

        result = StatusAutomationService(repository).run(today)

        assert result.error is None
        assert result.updated_count == 1
        assert repository.get_action("late").status == "delayed"

    def test_run_twice_changes_nothing(self, repository, program, today):
        """Test that a second run is a no-op."""
        repository.create_action(Action(
            program_id=program.id, name="Atrasada",
            status=ActionStatus.IN_PROGRESS, end_date=today - timedelta(days=3)
        ))
        service = StatusAutomationService(repository)

        assert service.run(today).updated_count == 1
        assert service.run(today).updated_count == 0

    def test_revert_disabled(self, repository, program, today):
        """Test that delayed actions stay delayed when reverting is off."""
        repository.create_action(Action(
            id="manual", program_id=program.id, name="Manual",
            status=ActionStatus.DELAYED, end_date=today + timedelta(days=30)
        ))

        result = StatusAutomationService(repository, revert_delayed=False).run(today)

        assert result.updated_count == 0
        assert repository.get_action("manual").status == "delayed"

    def test_no_changes_skips_write(self, today):
        """Test that nothing is written when nothing changed."""
        repository = Mock()
        repository.get_actions.return_value = []

        result = StatusAutomationService(repository).run(today)

        assert result.updated_count == 0
        repository.update_action_statuses.assert_not_called()

    def test_fetch_failure_is_swallowed(self, today):
        """Test that repository failures are reported, not raised."""
        repository = Mock()
        repository.get_actions.side_effect = RepositoryError("backend down")

        result = StatusAutomationService(repository).run(today)

        assert result.updated_count == 0
        assert result.error == "backend down"

    def test_write_failure_is_swallowed(self, today):
        """Test that a failed batch write reports zero updates."""
        repository = Mock()
        repository.get_actions.return_value = [
            Action(program_id="p1", name="A", status=ActionStatus.NOT_STARTED, end_date=today - timedelta(days=1))
        ]
        repository.update_action_statuses.side_effect = RepositoryError("write failed")

        result = StatusAutomationService(repository).run(today)

        assert result.updated_count == 0
        assert result.error == "write failed"

    def test_defaults_to_today(self, repository):
        """Test the default reference date."""
        assert StatusAutomationService(repository).run().reference_date == date.today()
