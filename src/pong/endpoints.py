"""Endpoint catalogue: built-in AWS regions plus user-supplied endpoint files."""

from __future__ import annotations

import json
import tomllib
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .contracts.error import BadInputError, IOErrorEnvelope

ALLOWED_ENDPOINT_SCHEMES = {"http", "https"}


@dataclass(frozen=True, slots=True)
class Endpoint:
    """A named network target probed independently of all others."""

    name: str
    url: str


# Links from https://docs.aws.amazon.com/general/latest/gr/rande.html#regional-endpoints
_AWS_REGIONS: tuple[tuple[str, str], ...] = (
    ("us-east-1 (Virginia)", "https://dynamodb.us-east-1.amazonaws.com/ping"),
    ("us-east-2 (Ohio)", "https://dynamodb.us-east-2.amazonaws.com/ping"),
    ("us-west-1 (California)", "https://dynamodb.us-west-1.amazonaws.com/ping"),
    ("us-west-2 (Oregon)", "https://dynamodb.us-west-2.amazonaws.com/ping"),
    ("ca-central-1 (Canada Central)", "https://dynamodb.ca-central-1.amazonaws.com/ping"),
    ("ca-west-1 (Canada West)", "https://dynamodb.ca-west-1.amazonaws.com/ping"),
    ("eu-west-1 (Ireland)", "https://dynamodb.eu-west-1.amazonaws.com/ping"),
    ("eu-west-2 (London)", "https://dynamodb.eu-west-2.amazonaws.com/ping"),
    ("eu-west-3 (Paris)", "https://dynamodb.eu-west-3.amazonaws.com/ping"),
    ("eu-central-1 (Frankfurt)", "https://dynamodb.eu-central-1.amazonaws.com/ping"),
    ("eu-central-2 (Zurich)", "https://dynamodb.eu-central-2.amazonaws.com/ping"),
    ("eu-south-1 (Milan)", "https://dynamodb.eu-south-1.amazonaws.com/ping"),
    ("eu-south-2 (Spain)", "https://dynamodb.eu-south-2.amazonaws.com/ping"),
    ("eu-north-1 (Stockholm)", "https://dynamodb.eu-north-1.amazonaws.com/ping"),
    ("il-central-1 (Israel)", "https://dynamodb.il-central-1.amazonaws.com/ping"),
    ("me-south-1 (Bahrain)", "https://dynamodb.me-south-1.amazonaws.com/ping"),
    ("me-central-1 (UAE)", "https://streams.dynamodb.me-central-1.amazonaws.com/ping"),
    ("af-south-1 (Cape Town)", "https://dynamodb.af-south-1.amazonaws.com/ping"),
    ("ap-east-1 (Hong Kong)", "https://dynamodb.ap-east-1.amazonaws.com/ping"),
    ("ap-southeast-3 (Jakarta)", "https://dynamodb.ap-southeast-3.amazonaws.com/ping"),
    ("ap-south-1 (Mumbai)", "https://dynamodb.ap-south-1.amazonaws.com/ping"),
    ("ap-south-2 (Hyderabad)", "https://dynamodb.ap-south-2.amazonaws.com/ping"),
    ("ap-northeast-3 (Osaka)", "https://dynamodb.ap-northeast-3.amazonaws.com/ping"),
    ("ap-northeast-2 (Seoul)", "https://dynamodb.ap-northeast-2.amazonaws.com/ping"),
    ("ap-southeast-1 (Singapore)", "https://dynamodb.ap-southeast-1.amazonaws.com/ping"),
    ("ap-southeast-2 (Sydney)", "https://dynamodb.ap-southeast-2.amazonaws.com/ping"),
    ("ap-southeast-4 (Melbourne)", "https://dynamodb.ap-southeast-4.amazonaws.com/ping"),
    ("ap-northeast-1 (Tokyo)", "https://dynamodb.ap-northeast-1.amazonaws.com/ping"),
    ("sa-east-1 (São Paulo)", "https://dynamodb.sa-east-1.amazonaws.com/ping"),
    ("cn-north-1 (Beijing)", "https://dynamodb.cn-north-1.amazonaws.com.cn/ping"),
    ("cn-northwest-1 (Ningxia)", "https://dynamodb.cn-northwest-1.amazonaws.com.cn/ping"),
    ("us-gov-east-1", "https://dynamodb.us-gov-east-1.amazonaws.com/ping"),
    ("us-gov-west-1", "https://dynamodb.us-gov-west-1.amazonaws.com/ping"),
)

DEFAULT_ENDPOINTS: tuple[Endpoint, ...] = tuple(Endpoint(name, url) for name, url in _AWS_REGIONS)


class EndpointModel(BaseModel):
    """Validated endpoint entry from a user-supplied file."""

    name: str = Field(..., min_length=1, description="Row label shown in the dashboard.")
    url: str = Field(..., description="http(s) URL that receives HEAD probes.")

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("name must not be blank")
        return stripped

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        parsed = urlparse(value.strip())
        if parsed.scheme.lower() not in ALLOWED_ENDPOINT_SCHEMES:
            raise ValueError(f"unsupported scheme '{parsed.scheme}' (allowed: http, https)")
        if not parsed.netloc:
            raise ValueError("url must include a host")
        return value.strip()

    def to_endpoint(self) -> Endpoint:
        return Endpoint(name=self.name, url=self.url)


class EndpointFile(BaseModel):
    endpoints: list[EndpointModel] = Field(..., min_length=1)

    @model_validator(mode="after")
    def _unique_names(self) -> EndpointFile:
        seen: set[str] = set()
        for entry in self.endpoints:
            if entry.name in seen:
                raise ValueError(f"duplicate endpoint name '{entry.name}'")
            seen.add(entry.name)
        return self


def _read_payload(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise IOErrorEnvelope(f"Endpoint file not found: {path}") from exc
    except OSError as exc:
        raise IOErrorEnvelope(f"Unable to read endpoint file {path}: {exc}") from exc
    if path.suffix.lower() == ".json":
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise BadInputError(f"Invalid JSON in {path}: {exc}") from exc
        # A bare list is accepted as shorthand for {"endpoints": [...]}.
        return {"endpoints": payload} if isinstance(payload, list) else payload
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise BadInputError(f"Invalid TOML in {path}: {exc}") from exc


def load_endpoints(path: str | Path) -> tuple[Endpoint, ...]:
    """Load and validate an endpoint list from a TOML or JSON file."""

    file_path = Path(path).expanduser()
    payload = _read_payload(file_path)
    if not isinstance(payload, dict):
        raise BadInputError(f"{file_path} must contain a table with an 'endpoints' list")
    try:
        parsed = EndpointFile.model_validate(payload)
    except ValidationError as exc:
        raise BadInputError(
            f"Invalid endpoint file {file_path}: {exc.errors()[0]['msg']}",
            hint="Each entry needs a unique 'name' and an http(s) 'url'.",
        ) from exc
    return tuple(entry.to_endpoint() for entry in parsed.endpoints)


def filter_endpoints(
    endpoints: Sequence[Endpoint], patterns: Iterable[str]
) -> tuple[Endpoint, ...]:
    """Keep endpoints whose name contains any pattern (case-insensitive)."""

    needles = [p.strip().lower() for p in patterns if p.strip()]
    if not needles:
        return tuple(endpoints)
    selected = tuple(ep for ep in endpoints if any(n in ep.name.lower() for n in needles))
    if not selected:
        raise BadInputError(f"No endpoints match {', '.join(needles)!r}")
    return selected


__all__ = [
    "ALLOWED_ENDPOINT_SCHEMES",
    "DEFAULT_ENDPOINTS",
    "Endpoint",
    "EndpointFile",
    "EndpointModel",
    "filter_endpoints",
    "load_endpoints",
]
