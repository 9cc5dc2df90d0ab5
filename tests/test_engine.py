import copy
from datetime import datetime, timedelta, timezone
import unittest

from timelog.engine import Engine
from timelog.errors import (
    DuplicateProject,
    InvalidDuration,
    InvalidProjectName,
    MissingDescription,
    NegativeDuration,
    NoActiveProject,
    NothingToUndo,
    NoTimeLogged,
    TimerAlreadyRunning,
    TimerNotRunning,
    TimerRunning,
    UnknownProject,
)
from timelog.models import TimeEntry
from timelog.state import PersistedState, empty_payload

START = datetime(2026, 10, 18, 9, 0, 0, tzinfo=timezone.utc)


class MemoryStorage:
    def __init__(self, payload=None):
        self.payload = payload if payload is not None else empty_payload()
        self.saves = 0

    def load(self):
        return copy.deepcopy(self.payload)

    def save(self, payload):
        self.payload = copy.deepcopy(payload)
        self.saves += 1


class FakeClock:
    def __init__(self, now: datetime):
        self.current = now

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


class EngineTests(unittest.TestCase):
    def setUp(self) -> None:
        self.storage = MemoryStorage()
        self.clock = FakeClock(START)
        self.engine = Engine(self.storage, clock=self.clock)

    def _state(self) -> PersistedState:
        return PersistedState.from_dict(self.storage.payload)

    def _entries(self, project: str) -> list[TimeEntry]:
        return self._state().store.get(project).entries

    def _log(self, project: str, description: str, **elapsed) -> None:
        self.engine.on()
        self.clock.advance(**elapsed)
        self.engine.off(description)

    def test_new_creates_project_and_selects_it(self):
        self.assertEqual(self.engine.new("acme"), "Added project acme.")
        state = self._state()
        self.assertIn("acme", state.store)
        self.assertEqual(state.store.active_project, "acme")
        self.assertEqual(state.store.get("acme").entries, [])

    def test_new_duplicate_fails_without_saving(self):
        self.engine.new("acme")
        saves = self.storage.saves
        with self.assertRaises(DuplicateProject):
            self.engine.new("acme")
        self.assertEqual(self.storage.saves, saves)

    def test_project_names_are_case_sensitive(self):
        self.engine.new("acme")
        self.engine.new("Acme")
        self.assertEqual(sorted(self._state().store.projects), ["Acme", "acme"])

    def test_new_rejects_blank_name(self):
        with self.assertRaises(InvalidProjectName):
            self.engine.new("   ")

    def test_new_while_timer_running_fails(self):
        self.engine.new("acme")
        self.engine.on()
        with self.assertRaises(TimerRunning):
            self.engine.new("beta")
        self.assertEqual(self._state().store.active_project, "acme")

    def test_on_off_records_elapsed_time(self):
        self.engine.new("acme")
        self.assertEqual(self.engine.on(), "Now tracking time for project acme.")
        self.clock.advance(hours=1, minutes=30, seconds=5)
        self.assertEqual(self.engine.off("wrote spec"), "Logged 1h 30m 5s for project acme.")

        state = self._state()
        self.assertFalse(state.timer.running)
        self.assertEqual(
            state.store.get("acme").entries,
            [TimeEntry(duration=timedelta(hours=1, minutes=30, seconds=5), description="wrote spec", start=START)],
        )

    def test_timer_start_is_truncated_to_seconds(self):
        self.clock.current = START + timedelta(microseconds=750000)
        self.engine.new("acme")
        self.engine.on()
        self.assertEqual(self._state().timer.start, START)

    def test_off_strips_description(self):
        self.engine.new("acme")
        self._log("acme", "  review  ", minutes=5)
        self.assertEqual(self._entries("acme")[0].description, "review")

    def test_on_without_active_project(self):
        with self.assertRaises(NoActiveProject):
            self.engine.on()

    def test_on_twice_fails(self):
        self.engine.new("acme")
        self.engine.on()
        with self.assertRaises(TimerAlreadyRunning):
            self.engine.on()

    def test_off_without_timer(self):
        self.engine.new("acme")
        with self.assertRaises(TimerNotRunning):
            self.engine.off("nothing")

    def test_off_requires_description_and_keeps_timer(self):
        self.engine.new("acme")
        self.engine.on()
        before = copy.deepcopy(self.storage.payload)
        with self.assertRaises(MissingDescription):
            self.engine.off("   ")
        self.assertEqual(self.storage.payload, before)
        self.assertTrue(self._state().timer.running)

    def test_off_with_clock_going_backwards(self):
        self.engine.new("acme")
        self.engine.on()
        self.clock.advance(seconds=-30)
        with self.assertRaises(NegativeDuration):
            self.engine.off("time travel")
        self.assertTrue(self._state().timer.running)
        self.assertEqual(self._entries("acme"), [])

    def test_undo_after_on_cancels_timer(self):
        self.engine.new("acme")
        self._log("acme", "first", minutes=20)
        entries_before = self._entries("acme")

        self.engine.on()
        self.clock.advance(minutes=10)
        self.assertEqual(self.engine.undo(), "Cancelled 10m of unlogged time for project acme.")

        state = self._state()
        self.assertFalse(state.timer.running)
        self.assertIsNone(state.timer.start)
        self.assertEqual(state.store.get("acme").entries, entries_before)

    def test_undo_after_off_rearms_timer(self):
        self.engine.new("acme")
        self.engine.on()
        self.clock.advance(minutes=45)
        self.engine.off("wrote docs")

        message = self.engine.undo()
        self.assertIn("Removed the last entry (45m: wrote docs)", message)

        state = self._state()
        self.assertEqual(state.store.get("acme").entries, [])
        self.assertTrue(state.timer.running)
        self.assertEqual(state.timer.start, START)
        self.assertEqual(state.timer.project, "acme")

        self.clock.advance(minutes=15)
        self.engine.off("wrote more docs")
        self.assertEqual(self._entries("acme")[0].duration, timedelta(hours=1))

    def test_undo_after_off_removes_only_last_entry(self):
        self.engine.new("acme")
        self._log("acme", "first", minutes=10)
        self._log("acme", "second", minutes=20)
        self.engine.undo()
        self.assertEqual([item.description for item in self._entries("acme")], ["first"])

    def test_undo_after_off_reselects_project(self):
        self.engine.new("acme")
        self.engine.new("beta")
        self.engine.switch("acme")
        self._log("acme", "work", minutes=10)
        self.engine.switch("beta")

        self.engine.undo()
        state = self._state()
        self.assertEqual(state.store.active_project, "acme")
        self.assertEqual(state.timer.project, "acme")

    def test_edit_after_off_changes_only_duration(self):
        self.engine.new("acme")
        self._log("acme", "first", minutes=10)
        self._log("acme", "second", hours=1)

        self.assertEqual(self.engine.edit(timedelta(hours=2)), "Modified the last entry from 1h to 2h.")
        entries = self._entries("acme")
        self.assertEqual(entries[0].duration, timedelta(minutes=10))
        self.assertEqual(entries[0].description, "first")
        self.assertEqual(entries[1].duration, timedelta(hours=2))
        self.assertEqual(entries[1].description, "second")

        self.engine.undo()
        entries = self._entries("acme")
        self.assertEqual(entries[1].duration, timedelta(hours=1))
        self.assertEqual(entries[1].description, "second")

    def test_edit_with_description(self):
        self.engine.new("acme")
        self._log("acme", "draft", minutes=10)
        message = self.engine.edit(timedelta(minutes=30), "final")
        self.assertIn("changed its description to 'final'", message)
        self.assertEqual(self._entries("acme")[0].description, "final")

        self.engine.undo()
        self.assertEqual(self._entries("acme")[0].description, "draft")

    def test_edit_accepts_zero_duration(self):
        self.engine.new("acme")
        self._log("acme", "oops", minutes=10)
        self.engine.edit(timedelta())
        self.assertEqual(self._entries("acme")[0].duration, timedelta())

    def test_edit_rejects_negative_duration(self):
        self.engine.new("acme")
        self._log("acme", "work", minutes=10)
        with self.assertRaises(InvalidDuration):
            self.engine.edit(timedelta(minutes=-5))
        self.assertEqual(self._entries("acme")[0].duration, timedelta(minutes=10))

    def test_edit_rejects_blank_description(self):
        self.engine.new("acme")
        self._log("acme", "work", minutes=10)
        with self.assertRaises(MissingDescription):
            self.engine.edit(timedelta(minutes=5), " ")

    def test_edit_without_entries(self):
        self.engine.new("acme")
        with self.assertRaises(NoTimeLogged):
            self.engine.edit(timedelta(minutes=5))

    def test_edit_while_timer_running(self):
        self.engine.new("acme")
        self._log("acme", "work", minutes=10)
        self.engine.on()
        with self.assertRaises(TimerRunning):
            self.engine.edit(timedelta(minutes=5))

    def test_undo_twice_fails(self):
        self.engine.new("acme")
        self._log("acme", "work", minutes=10)
        self.engine.undo()
        with self.assertRaises(NothingToUndo):
            self.engine.undo()
        with self.assertRaises(NothingToUndo):
            self.engine.undo()

    def test_undo_on_empty_store(self):
        with self.assertRaises(NothingToUndo):
            self.engine.undo()

    def test_delete_running_project_fails(self):
        self.engine.new("acme")
        self._log("acme", "work", minutes=10)
        self.engine.on()
        before = copy.deepcopy(self.storage.payload)

        with self.assertRaises(TimerRunning):
            self.engine.delete("acme")
        self.assertEqual(self.storage.payload, before)

    def test_delete_unknown_project(self):
        with self.assertRaises(UnknownProject):
            self.engine.delete("ghost")

    def test_delete_active_project_clears_hat_and_undo_restores_it(self):
        self.engine.new("acme")
        self._log("acme", "first", minutes=10)
        self._log("acme", "second", minutes=20)

        self.assertEqual(self.engine.delete("acme"), "Removed project acme.")
        state = self._state()
        self.assertNotIn("acme", state.store)
        self.assertIsNone(state.store.active_project)

        self.assertEqual(self.engine.undo(), "Restored project acme with 2 entries.")
        state = self._state()
        self.assertEqual(state.store.active_project, "acme")
        self.assertEqual([item.description for item in state.store.get("acme").entries], ["first", "second"])

    def test_delete_other_project_keeps_hat(self):
        self.engine.new("acme")
        self.engine.new("beta")
        self.engine.on()
        self.engine.delete("acme")

        state = self._state()
        self.assertEqual(state.store.active_project, "beta")
        self.assertTrue(state.timer.is_running_for("beta"))

        self.engine.undo()
        state = self._state()
        self.assertIn("acme", state.store)
        self.assertEqual(state.store.active_project, "beta")

    def test_switch(self):
        self.engine.new("acme")
        self.engine.new("beta")
        self.assertEqual(self.engine.switch("acme"), "Selected project acme.")
        self.assertEqual(self._state().store.active_project, "acme")

    def test_names_are_stripped_for_switch_and_delete(self):
        self.engine.new(" acme ")
        self.engine.new("beta")
        self.assertEqual(self.engine.switch("  acme"), "Selected project acme.")
        self.assertEqual(self.engine.delete("acme  "), "Removed project acme.")
        self.assertNotIn("acme", self._state().store)
        with self.assertRaises(InvalidProjectName):
            self.engine.delete("  ")

    def test_switch_unknown_project(self):
        with self.assertRaises(UnknownProject):
            self.engine.switch("ghost")

    def test_switch_while_running_for_other_project(self):
        self.engine.new("acme")
        self.engine.new("beta")
        self.engine.on()
        with self.assertRaises(TimerRunning):
            self.engine.switch("acme")
        self.assertEqual(self.engine.switch("beta"), "Selected project beta.")

    def test_switch_is_not_undoable(self):
        self.engine.new("acme")
        self.engine.new("beta")
        self.engine.switch("acme")

        self.assertEqual(self.engine.undo(), "Removed newly created project beta.")
        state = self._state()
        self.assertNotIn("beta", state.store)
        self.assertEqual(state.store.active_project, "acme")

    def test_undo_new_restores_previous_hat(self):
        self.engine.new("acme")
        self.engine.new("beta")
        self.engine.undo()
        state = self._state()
        self.assertEqual(list(state.store.projects), ["acme"])
        self.assertEqual(state.store.active_project, "acme")

    def test_list_and_time(self):
        self.assertEqual(self.engine.list(), "No projects found.")
        self.engine.new("acme")
        self._log("acme", "wrote spec", hours=1, minutes=30)
        self.engine.new("beta")
        self.engine.on()
        self.clock.advance(minutes=5)

        listing = self.engine.list()
        self.assertIn("Project list:", listing)
        self.assertIn("    acme - 01:30:00", listing)
        self.assertIn("  * beta - 00:00:00 (tracking 5m)", listing)

        self.assertEqual(
            self.engine.time(),
            "No logged times for project beta.\nCurrently tracking 5m of unlogged time.",
        )

        self.engine.undo()
        self.engine.switch("acme")
        report = self.engine.time()
        self.assertIn("Logged times for acme, totaling 1h 30m:", report)
        self.assertIn("01:30:00  wrote spec", report)

    def test_time_without_active_project(self):
        with self.assertRaises(NoActiveProject):
            self.engine.time()

    def test_overview(self):
        self.assertEqual(self.engine.overview(), "No projects found.")
        self.engine.new("acme")
        overview = self.engine.overview()
        self.assertIn("Project list:", overview)
        self.assertIn("No logged times for project acme.", overview)

    def test_queries_do_not_save(self):
        self.engine.new("acme")
        saves = self.storage.saves
        self.engine.list()
        self.engine.time()
        self.engine.overview()
        self.assertEqual(self.storage.saves, saves)

    def test_apply_leaves_input_state_untouched(self):
        state = PersistedState()
        new_state, message = self.engine.apply(state, "new", "acme")
        self.assertEqual(message, "Added project acme.")
        self.assertEqual(state, PersistedState())
        self.assertIn("acme", new_state.store)

    def test_apply_unknown_operation(self):
        with self.assertRaises(ValueError):
            self.engine.apply(PersistedState(), "archive")

    def test_full_scenario(self):
        self.engine.new("acme")
        self.assertEqual(self._state().store.active_project, "acme")
        self.engine.on()
        self.clock.advance(minutes=42)
        self.engine.off("wrote spec")
        self.assertIn("acme - 00:42:00", self.engine.list())

        self.engine.undo()
        state = self._state()
        self.assertEqual(state.store.get("acme").entries, [])
        self.assertEqual(state.timer.start, START)

        with self.assertRaises(NothingToUndo):
            self.engine.undo()


if __name__ == "__main__":
    unittest.main()
