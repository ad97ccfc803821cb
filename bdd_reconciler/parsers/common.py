"""Helpers shared by the report parsers."""

import re
import xml.etree.ElementTree as ET
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from pathlib import Path

from bdd_reconciler.models.execution import (
    ExecutionStatus,
    FeatureResult,
    ScenarioResult,
    StepResult,
)
from bdd_reconciler.statistics import derive_feature_status

CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
TIMESPAN = re.compile(r"^(?:(\d+)\.)?(\d+):(\d+):(\d+(?:\.\d+)?)$")
FEATURE_LINE = re.compile(r"\.feature:(\d+)|\bline\s+(\d+)")


def root_tag(path: Path) -> tuple[str | None, str]:
    """Return ``(namespace, local_name)`` of the document element.

    Only the first start tag is read, so probing stays cheap on large files.
    """
    with path.open("rb") as handle:
        for _event, element in ET.iterparse(handle, events=("start",)):
            return split_tag(element.tag)
    raise ValueError("empty XML document")


def load_xml(path: Path) -> ET.Element:
    """Parse a whole XML file and return its root element."""
    return ET.parse(path).getroot()


def split_tag(tag: str) -> tuple[str | None, str]:
    """Split ``{namespace}local`` into its parts."""
    if tag.startswith("{"):
        namespace, _, local = tag[1:].partition("}")
        return namespace, local
    return None, tag


def text_of(
    element: ET.Element | None,
    path: str,
    namespaces: Mapping[str, str] | None = None,
) -> str | None:
    """Text of a child element, None when absent or empty."""
    if element is None:
        return None
    child = element.find(path, namespaces)
    if child is None or child.text is None:
        return None
    return child.text.strip() or None


def property_value(
    element: ET.Element, names: Sequence[str], path: str = "properties/property"
) -> str | None:
    """First non-empty ``value`` of a ``<property name=...>`` child."""
    for prop in element.findall(path):
        if prop.get("name") in names and prop.get("value"):
            return prop.get("value")
    return None


def parse_seconds(value: str | None) -> float:
    """Parse a duration attribute in seconds; missing means zero."""
    if value is None or not value.strip():
        return 0.0
    return float(value)


def parse_timespan(value: str | None) -> float:
    """Parse a ``[d.]hh:mm:ss[.fffffff]`` time span into seconds."""
    if value is None or not value.strip():
        return 0.0
    match = TIMESPAN.match(value.strip())
    if match is None:
        raise ValueError(f"invalid duration {value!r}")
    days, hours, minutes, seconds = match.groups()
    return (
        int(days or 0) * 86400 + int(hours) * 3600 + int(minutes) * 60 + float(seconds)
    )


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp into an aware datetime.

    Naive values are taken as UTC. Unparseable values yield None: a report
    without a usable timestamp is still a valid report.
    """
    if value is None or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed


def split_camel_case(name: str) -> str:
    """Insert spaces at camel-case boundaries of an identifier-like name.

    Any parameter list (from the first ``(``) is kept untouched.
    """
    base, paren, params = name.partition("(")
    if " " in base.strip():
        return name
    spaced = CAMEL_BOUNDARY.sub(" ", base.replace("_", " ")).strip()
    return f"{spaced}{paren}{params}"


def member_name(qualified: str) -> str:
    """Strip namespace/class qualifiers from a test name, keeping parameters."""
    base, paren, params = qualified.partition("(")
    if " " in base.strip():
        return qualified
    return f"{base.rsplit('.', 1)[-1]}{paren}{params}"


def readable_feature_name(native: str) -> str:
    """Turn a class, collection or suite name into a readable feature name.

    ``MyApp.Features.UserLoginFeature`` becomes ``User Login``.
    """
    name = native.strip()
    if " " not in name:
        name = name.rsplit(".", 1)[-1]
    name = split_camel_case(name)
    if name.endswith(" Feature"):
        name = name.removesuffix(" Feature")
    elif name.endswith("Feature") and name != "Feature":
        name = name.removesuffix("Feature")
    return name.strip() or native.strip()


def readable_scenario_name(native: str) -> str:
    """Turn a method-style test name into a readable scenario name."""
    return split_camel_case(member_name(native.strip()))


def failed_line(*texts: str | None) -> int | None:
    """Find the feature-file line a failure points at, if any."""
    for text in texts:
        if not text:
            continue
        match = FEATURE_LINE.search(text)
        if match is not None:
            return int(match.group(1) or match.group(2))
    return None


def ensure_failed_step(
    steps: Sequence[StepResult], error_message: str | None
) -> list[StepResult]:
    """Mark the last recovered step failed when a failed scenario shows none."""
    recovered = list(steps)
    if not recovered or any(s.status == ExecutionStatus.FAILED for s in recovered):
        return recovered
    recovered[-1] = recovered[-1].model_copy(
        update={
            "status": ExecutionStatus.FAILED,
            "error_message": recovered[-1].error_message or error_message,
        }
    )
    return recovered


def build_feature(
    *,
    name: str,
    file_path: str = "",
    tags: Sequence[str] = (),
    scenarios: Sequence[ScenarioResult],
) -> FeatureResult:
    """Assemble a feature with duration and status derived from its scenarios."""
    return FeatureResult(
        name=name,
        file_path=file_path,
        tags=list(tags),
        duration=sum(s.duration for s in scenarios),
        status=derive_feature_status(s.status for s in scenarios),
        scenarios=list(scenarios),
    )
