import signal
import sys

from rich.markup import escape

from vidscribe.errors import VidscribeError
from vidscribe.orchestrator import Orchestrator, err_console

USAGE = (
    "Usage: python main.py [analyze [VIDEO_PATH]|files]\n"
    "  analyze: Upload (or reuse) the video, wait for processing, and extract title, summary, chapters, tags and blog.\n"
    "  files:   List the files already uploaded to the Gemini Files API."
)


def main() -> int:
    if len(sys.argv) < 2:
        print(USAGE)
        return 0

    command = sys.argv[1].lower()
    if command not in ("analyze", "files"):
        print(f"Unknown command: {command}")
        print(USAGE)
        return 2

    try:
        app = Orchestrator()
        signal.signal(signal.SIGTERM, app.cancel)

        if command == "analyze":
            return app.analyze(sys.argv[2] if len(sys.argv) > 2 else None)
        return app.list_files()
    except VidscribeError as e:
        err_console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
