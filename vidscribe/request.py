from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from google.genai import types

DEFAULT_PROMPT = (
    "Make a YouTube title, description, chapters, tags, and a 1000 word blog post "
    "in markdown format best for this video including images from the video."
)


def _string() -> types.Schema:
    return types.Schema(type=types.Type.STRING)


def _string_list() -> types.Schema:
    return types.Schema(type=types.Type.ARRAY, items=_string())


def _object(properties: Dict[str, types.Schema], required: List[str]) -> types.Schema:
    return types.Schema(type=types.Type.OBJECT, properties=properties, required=required)


def default_tool_schemas() -> Tuple[types.FunctionDeclaration, ...]:
    """The five extractions requested from the model: title, summary, chapters, tags and blog."""
    return (
        types.FunctionDeclaration(
            name="get_title",
            description="Create a great YouTube title for this video that is less than 6 words",
            parameters=_object({"title": _string()}, ["title"]),
        ),
        types.FunctionDeclaration(
            name="get_summary",
            description=(
                "Summarize this video and create an awesome YouTube description "
                "that is less than 100 words"
            ),
            parameters=_object({"summary": _string()}, ["summary"]),
        ),
        types.FunctionDeclaration(
            name="get_chapters",
            description=(
                "Extract max 10 video chapters with timestamps and a unique title "
                "based on the content of the video"
            ),
            parameters=_object(
                {
                    "chapters": types.Schema(
                        type=types.Type.ARRAY,
                        items=_object(
                            {
                                "timestamp": types.Schema(type=types.Type.NUMBER),
                                "title": _string(),
                            },
                            ["timestamp", "title"],
                        ),
                    )
                },
                ["chapters"],
            ),
        ),
        types.FunctionDeclaration(
            name="get_tags",
            description="Extract max 10 video tags best for YouTube",
            parameters=_object({"tags": _string_list()}, ["tags"]),
        ),
        types.FunctionDeclaration(
            name="get_blog",
            description=(
                "Create at least a 3000+ word blog post in markdown format best for this video "
                "including images from the video, in an array of paragraphs and images"
            ),
            parameters=_object(
                {
                    "blog": _string(),
                    "paragraphs": _string_list(),
                    "images": _string_list(),
                },
                ["blog", "paragraphs", "images"],
            ),
        ),
    )


def default_safety_thresholds() -> Dict[types.HarmCategory, types.HarmBlockThreshold]:
    return {
        types.HarmCategory.HARM_CATEGORY_HARASSMENT: types.HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    }


@dataclass(frozen=True)
class GenerationSettings:
    """
    Everything that shapes the generation request apart from the video itself.
    temperature/top_k/top_p control determinism, max_output_tokens the verbosity,
    and tool_schemas which structured extractions are requested.
    """
    temperature: float = 0.2
    top_k: int = 1
    top_p: float = 1.0
    max_output_tokens: int = 4000
    safety_thresholds: Dict[types.HarmCategory, types.HarmBlockThreshold] = field(
        default_factory=default_safety_thresholds
    )
    tool_schemas: Tuple[types.FunctionDeclaration, ...] = field(default_factory=default_tool_schemas)
    prompt_text: str = DEFAULT_PROMPT
    function_calling_mode: types.FunctionCallingConfigMode = types.FunctionCallingConfigMode.ANY


def build_contents(file: types.File, prompt_text: str) -> List[types.Content]:
    """A single user turn: the remote video followed by the instruction text."""
    return [
        types.Content(
            role="user",
            parts=[
                types.Part.from_uri(file_uri=file.uri, mime_type=file.mime_type),
                types.Part.from_text(text=prompt_text),
            ],
        )
    ]


def build_config(settings: GenerationSettings) -> types.GenerateContentConfig:
    return types.GenerateContentConfig(
        temperature=settings.temperature,
        top_k=settings.top_k,
        top_p=settings.top_p,
        max_output_tokens=settings.max_output_tokens,
        safety_settings=[
            types.SafetySetting(category=category, threshold=threshold)
            for category, threshold in settings.safety_thresholds.items()
        ],
        tools=[types.Tool(function_declarations=list(settings.tool_schemas))],
        tool_config=types.ToolConfig(
            function_calling_config=types.FunctionCallingConfig(mode=settings.function_calling_mode)
        ),
    )
