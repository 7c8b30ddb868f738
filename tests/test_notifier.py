import unittest
from unittest.mock import patch

from tomato import notifier
from tomato.clock import ManualClock
from tomato.controller import TomatoController
from tomato.main import status_line
from tomato.notifier import COMPLETION_MESSAGES, DesktopPresenter
from tomato.settings import Mode


class TestDesktopPresenter(unittest.TestCase):
    @patch.object(notifier, "notify")
    def test_session_complete_uses_mode_message(self, notify):
        DesktopPresenter(timeout=3).on_session_complete(Mode.LONG_BREAK)
        notify.assert_called_once_with("Pomodoro timer", COMPLETION_MESSAGES[Mode.LONG_BREAK], timeout=3)

    @patch.object(notifier, "notify")
    def test_goal_message_mentions_hours(self, notify):
        DesktopPresenter().on_goal_achieved(1.5)
        title, message = notify.call_args.args
        self.assertEqual(title, "Goal reached!")
        self.assertIn("1.5-hour", message)

    def test_every_mode_has_a_message(self):
        self.assertEqual(set(COMPLETION_MESSAGES), set(Mode))


class TestStatusLine(unittest.TestCase):
    def test_status_line_reports_countdown_and_goal(self):
        clock = ManualClock(1_700_000_000_000)
        ctl = TomatoController(clock=clock)
        ctl.update_settings(goal_hours=1)
        ctl.start()
        clock.advance(1_200_000)
        line = status_line(ctl, ctl.poll())
        self.assertIn("Focus 05:00 (running)", line)
        self.assertIn("today 20m, 33% of goal", line)
        self.assertIn("session #1", line)

    def test_status_line_shows_cycle_dots_and_required_sessions(self):
        clock = ManualClock(1_700_000_000_000)
        ctl = TomatoController(clock=clock)
        ctl.update_settings(goal_hours=1)
        line = status_line(ctl, ctl.snapshot())
        self.assertIn("session #1 [....]", line)
        self.assertIn("(0/3 sessions)", line)
        ctl.start()
        clock.advance(25 * 60_000)
        line = status_line(ctl, ctl.poll())
        self.assertIn("session #2 [*...]", line)
        self.assertIn("(1/3 sessions)", line)


if __name__ == "__main__":
    unittest.main()
