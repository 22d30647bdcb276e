"""Image labels from a vision model (LiteLLM).

The image is sent inline as a base64 data URL together with a prompt asking
for a JSON array of ``{"description", "score"}`` objects. The parsed labels
are stored as ``<name>--labels.json``, which is then indexed like any other
JSON file, so images become searchable by their labels.
"""

from __future__ import annotations

import base64
import json
import mimetypes
import re
from pathlib import Path

from docshelf.derive import llm_client
from docshelf.derive.base import Labeler
from docshelf.errors import DerivationServiceError

_PROMPT = """\
List up to {max_labels} labels describing the main objects, scenes and \
concepts in this image. Answer with a JSON array only, most confident first, \
each item shaped like {{"description": "dog", "score": 0.97}} with score \
between 0 and 1."""

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.MULTILINE)


def image_data_url(path: Path) -> str:
    mime, _ = mimetypes.guess_type(str(path))
    b64 = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime or 'image/jpeg'};base64,{b64}"


def parse_labels(raw: str, max_labels: int) -> list[dict]:
    """Parse the model's answer into ``[{"description": str, "score": float}]``.

    Raises:
        ValueError: If the answer is not a JSON array of label objects.
    """
    data = json.loads(_FENCE_RE.sub("", raw.strip()))
    if isinstance(data, dict) and "labels" in data:
        data = data["labels"]
    if not isinstance(data, list):
        raise ValueError(f"expected a JSON array of labels, got {type(data).__name__}")
    labels: list[dict] = []
    for item in data[:max_labels]:
        if isinstance(item, str):
            labels.append({"description": item, "score": None})
        elif isinstance(item, dict) and "description" in item:
            score = item.get("score")
            labels.append(
                {
                    "description": str(item["description"]),
                    "score": float(score) if score is not None else None,
                }
            )
        else:
            raise ValueError(f"unrecognised label entry: {item!r}")
    return labels


class LlmLabeler(Labeler):
    """Label annotation through any LiteLLM vision-capable model."""

    def __init__(self, model: str = "openai/gpt-4o-mini", max_labels: int = 10, timeout: float = 60.0) -> None:
        self.model = model
        self.max_labels = max_labels
        self.timeout = timeout

    def labels(self, path: Path) -> bytes:
        try:
            llm_client.validate_api_key(self.model)
            messages = [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": _PROMPT.format(max_labels=self.max_labels)},
                        {"type": "image_url", "image_url": {"url": image_data_url(path)}},
                    ],
                }
            ]
            raw = llm_client.complete(self.model, messages, timeout=self.timeout)
            labels = parse_labels(raw, self.max_labels)
        except Exception as exc:
            # litellm raises a wide family of provider-specific exceptions
            raise DerivationServiceError(
                f"Could not extract labels for {path}: {exc}", path=str(path), stage="labels"
            ) from exc
        return json.dumps({"model": self.model, "labels": labels}, indent=2).encode("utf-8")
