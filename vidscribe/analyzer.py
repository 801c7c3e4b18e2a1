import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from google.genai import types
from rich.console import Console
from rich.markup import escape

from .errors import (
    GenerationError,
    OperationCancelledError,
    ProcessingFailedError,
    ProcessingTimeoutError,
    UploadError,
)
from .request import GenerationSettings, build_config, build_contents


@dataclass
class GenerationResult:
    function_calls: List[Dict[str, Any]] = field(default_factory=list)
    total_tokens: Optional[int] = None
    error: Optional[GenerationError] = None

    @property
    def called(self) -> bool:
        return bool(self.function_calls)

    @property
    def failed(self) -> bool:
        return self.error is not None


def qualified_name(name: str) -> str:
    """Remote file names are listed as 'files/<id>'; accept the bare id too."""
    return name if name.startswith("files/") else f"files/{name}"


class VideoAnalysisClient:
    """
    Drives upload-or-reuse, wait-for-ready and generate against the Gemini API.
    The genai.Client is passed in so tests can substitute a fake.
    """

    def __init__(
        self,
        client,
        model: str,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.model = model
        self.console = console or Console()
        self.err_console = err_console or Console(stderr=True)
        self._sleep = sleep

    def list_files(self) -> List[types.File]:
        return list(self.client.files.list())

    def resolve_remote_file(
        self,
        local_path: Union[str, Path],
        desired_name: str,
        display_name: str,
        mime_type: str = "video/mp4",
        before_upload: Optional[Callable[[Path], None]] = None,
    ) -> types.File:
        """
        Returns the remote file called desired_name if the listing has one,
        otherwise uploads local_path under that name.
        before_upload is called with the local path only when an upload is about to happen.
        """
        wanted = qualified_name(desired_name)
        for remote in self.list_files():
            if remote.name == wanted:
                self.console.print(f"Using existing file [blue]{escape(remote.name)}[/blue]")
                return remote

        if before_upload:
            before_upload(Path(local_path))

        self.console.print("Uploading file...")
        try:
            uploaded = self.client.files.upload(
                file=local_path,
                config=types.UploadFileConfig(
                    name=wanted.split("/", 1)[1],
                    mime_type=mime_type,
                    display_name=display_name,
                ),
            )
        except OperationCancelledError:
            raise
        except Exception as e:
            raise UploadError(f"Failed to upload {local_path}: {e}") from e

        self.console.print(
            f"Uploaded file [blue]{escape(str(uploaded.display_name))}[/blue] as: {uploaded.uri}"
        )
        return uploaded

    def await_ready(
        self,
        file: types.File,
        poll_interval: float = 5.0,
        max_attempts: Optional[int] = None,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> types.File:
        """
        Re-fetches the file every poll_interval seconds while it is PROCESSING.

        Returns the file once ACTIVE (without fetching if it already is).
        Raises ProcessingFailedError on FAILED or any other non-ACTIVE state,
        ProcessingTimeoutError once max_attempts fetches or timeout seconds are used up,
        and OperationCancelledError when cancel_event is set.
        Errors from the fetch itself are not caught.
        """
        attempts = 0
        started = time.monotonic()

        while file.state == types.FileState.PROCESSING:
            if max_attempts and attempts >= max_attempts:
                self.console.print()
                raise ProcessingTimeoutError(
                    f"File {file.name} still processing after {attempts} checks.", file=file
                )
            if timeout is not None and time.monotonic() - started >= timeout:
                self.console.print()
                raise ProcessingTimeoutError(
                    f"File {file.name} still processing after {timeout} seconds.", file=file
                )

            self.console.print(".", end="")
            self._wait(poll_interval, cancel_event)
            file = self.client.files.get(name=file.name)
            attempts += 1

        if attempts:
            self.console.print()

        if file.state == types.FileState.FAILED:
            raise ProcessingFailedError("Video processing failed.", file=file)
        if file.state != types.FileState.ACTIVE:
            raise ProcessingFailedError(
                f"File {file.name} is in unexpected state {file.state}.", file=file
            )

        self.console.print(
            f"File [blue]{escape(str(file.display_name))}[/blue] is ready for inference as {file.uri}"
        )
        return file

    def _wait(self, seconds: float, cancel_event: Optional[threading.Event]):
        if cancel_event is None:
            self._sleep(seconds)
            return
        if cancel_event.is_set() or cancel_event.wait(seconds):
            self.console.print()
            raise OperationCancelledError("Stopped waiting for file processing.")

    def count_tokens(self, file: types.File, settings: Optional[GenerationSettings] = None) -> int:
        settings = settings or GenerationSettings()
        response = self.client.models.count_tokens(
            model=self.model,
            contents=build_contents(file, settings.prompt_text),
        )
        return response.total_tokens

    def generate(
        self, file: types.File, settings: Optional[GenerationSettings] = None
    ) -> GenerationResult:
        """
        Counts tokens, then asks the model to pick from the tool schemas.
        Failures of either call are reported and returned in the result; only cancellation is raised.
        """
        settings = settings or GenerationSettings()
        contents = build_contents(file, settings.prompt_text)
        config = build_config(settings)
        result = GenerationResult()

        try:
            result.total_tokens = self.count_tokens(file, settings)
            self.console.print(f"Token count: {result.total_tokens}")

            response = self.client.models.generate_content(
                model=self.model,
                contents=contents,
                config=config,
            )
        except OperationCancelledError:
            raise
        except Exception as e:
            result.error = GenerationError(f"Error generating content: {e}", cause=e)
            self.err_console.print(f"[bold red]Error generating content:[/bold red] {escape(str(e))}")
            return result

        for call in response.function_calls or []:
            result.function_calls.append({"name": call.name, "args": dict(call.args or {})})
        return result

    def analyze(
        self,
        local_path: Union[str, Path],
        desired_name: str,
        display_name: str,
        mime_type: str = "video/mp4",
        settings: Optional[GenerationSettings] = None,
        poll_interval: float = 5.0,
        max_attempts: Optional[int] = None,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
        before_upload: Optional[Callable[[Path], None]] = None,
    ) -> GenerationResult:
        remote = self.resolve_remote_file(
            local_path, desired_name, display_name, mime_type, before_upload=before_upload
        )
        ready = self.await_ready(
            remote,
            poll_interval=poll_interval,
            max_attempts=max_attempts,
            timeout=timeout,
            cancel_event=cancel_event,
        )
        return self.generate(ready, settings)
