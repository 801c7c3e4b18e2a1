import io
import os
import signal
import unittest
from contextlib import redirect_stdout
from unittest.mock import MagicMock, patch

from google.genai import types
from rich.console import Console

import main
from vidscribe.analyzer import VideoAnalysisClient
from vidscribe.config import Settings
from vidscribe.errors import StartupConfigError
from vidscribe.orchestrator import Orchestrator


def make_app(client):
    quiet = Console(file=io.StringIO())
    analyzer = VideoAnalysisClient(client, "gemini-test", console=quiet, err_console=quiet)
    return Orchestrator(settings=Settings(api_key="fake_key", poll_interval=0), analysis_client=analyzer)


class TestMain(unittest.TestCase):
    def setUp(self):
        self.previous_handler = signal.getsignal(signal.SIGTERM)
        self.stdout = io.StringIO()

    def tearDown(self):
        signal.signal(signal.SIGTERM, self.previous_handler)

    def run_main(self, *args):
        with patch.object(main.sys, 'argv', ["main.py", *args]), redirect_stdout(self.stdout):
            return main.main()

    def test_no_command_prints_usage(self):
        self.assertEqual(self.run_main(), 0)
        self.assertIn("Usage: python main.py", self.stdout.getvalue())

    def test_unknown_command(self):
        self.assertEqual(self.run_main("transcode"), 2)
        self.assertIn("Unknown command: transcode", self.stdout.getvalue())

    @patch('main.err_console', Console(file=io.StringIO()))
    @patch('main.Orchestrator', side_effect=StartupConfigError("Environment variable GEMINI_API_KEY is missing."))
    def test_missing_api_key_exits_1(self, mock_orchestrator):
        self.assertEqual(self.run_main("analyze"), 1)

    @patch('main.Orchestrator')
    def test_files_command(self, mock_orchestrator):
        mock_orchestrator.return_value.list_files.return_value = 0
        self.assertEqual(self.run_main("files"), 0)
        mock_orchestrator.return_value.list_files.assert_called_once()

    @patch('main.Orchestrator')
    def test_analyze_passes_video_path(self, mock_orchestrator):
        mock_orchestrator.return_value.analyze.return_value = 0
        self.assertEqual(self.run_main("analyze", "clips/talk.mp4"), 0)
        mock_orchestrator.return_value.analyze.assert_called_once_with("clips/talk.mp4")

    @unittest.skipUnless(os.name == "posix", "needs POSIX signals")
    @patch('main.err_console', Console(file=io.StringIO()))
    def test_sigterm_during_generation_exits_1(self):
        client = MagicMock()
        client.files.list.return_value = [
            types.File(
                name="files/ai-persuasion",
                display_name="AI Persuasion",
                mime_type="video/mp4",
                uri="https://generativelanguage.googleapis.com/v1beta/files/ai-persuasion",
                state=types.FileState.ACTIVE,
            )
        ]
        client.models.count_tokens.return_value.total_tokens = 1
        client.models.generate_content.side_effect = lambda **kwargs: os.kill(os.getpid(), signal.SIGTERM)
        app = make_app(client)

        with patch('main.Orchestrator', return_value=app):
            self.assertEqual(self.run_main("analyze"), 1)
        self.assertTrue(app.cancel_event.is_set())
        self.assertNotIn("No functions called", self.stdout.getvalue())


if __name__ == '__main__':
    unittest.main()
