import threading
from pathlib import Path
from typing import Optional

from google import genai
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .analyzer import GenerationResult, VideoAnalysisClient
from .config import Settings
from .errors import OperationCancelledError
from .probe import probe_video
from .request import GenerationSettings

console = Console()
err_console = Console(stderr=True)


class Orchestrator:
    def __init__(self, settings: Optional[Settings] = None, analysis_client: Optional[VideoAnalysisClient] = None):
        # Raises StartupConfigError when GEMINI_API_KEY is not set
        self.settings = settings if settings else Settings.from_env()

        # Dependency Injection or Default
        if analysis_client:
            self.analysis_client = analysis_client
        else:
            self.analysis_client = VideoAnalysisClient(
                genai.Client(api_key=self.settings.api_key),
                model=self.settings.model,
                console=console,
                err_console=err_console,
            )

        self.generation_settings = GenerationSettings()
        self.cancel_event = threading.Event()

    def cancel(self, signum=None, frame=None):
        """Signal handler: stops the processing wait and aborts whatever remote call is in flight."""
        self.cancel_event.set()
        raise OperationCancelledError(f"Cancelled by signal {signum}.")

    def analyze(self, video_path: Optional[str] = None) -> int:
        """Upload (or reuse) the video, wait until it is ACTIVE and extract the YouTube metadata."""
        path = Path(video_path) if video_path else self.settings.video_path

        result = self.analysis_client.analyze(
            path,
            self.settings.remote_file_name,
            self.settings.display_name,
            mime_type=self.settings.mime_type,
            settings=self.generation_settings,
            poll_interval=self.settings.poll_interval,
            max_attempts=self.settings.poll_max_attempts,
            cancel_event=self.cancel_event,
            before_upload=self.check_local_video,
        )
        self.report(result)
        return 1 if result.failed else 0

    def check_local_video(self, path: Path):
        """Raises UploadError for a missing or stream-less video before any bytes are sent."""
        info = probe_video(path)
        if info:
            console.print(f"Local video [blue]{escape(path.name)}[/blue]: {info.describe()}")

    def report(self, result: GenerationResult):
        if result.failed:
            return
        if not result.called:
            console.print("[yellow]No functions called[/yellow]")
            return
        console.print_json(data=result.function_calls, indent=2)

    def list_files(self) -> int:
        files = self.analysis_client.list_files()
        if not files:
            console.print("[yellow]No remote files.[/yellow]")
            return 0

        table = Table(title="Remote files")
        table.add_column("Name", style="blue")
        table.add_column("Display name")
        table.add_column("State")
        table.add_column("URI")
        for f in files:
            state = f.state.name if f.state is not None else "-"
            table.add_row(escape(f.name or "-"), escape(f.display_name or "-"), state, escape(f.uri or "-"))
        console.print(table)
        return 0
