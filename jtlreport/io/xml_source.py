"""Streaming reader for XML JTL files.

A JTL document is a ``<testResults>`` root holding ``<sample>`` and
``<httpSample>`` elements, possibly nested (transaction controllers wrap
their child requests), each optionally carrying ``<assertionResult>``
children::

    <httpSample t="4" ts="1301400114405" s="true" lb="Login" rc="200"
                rm="OK" by="2469">
      <assertionResult>
        <name>Response Assertion</name>
        <failure>false</failure>
        <error>false</error>
      </assertionResult>
    </httpSample>

Parsing uses :func:`xml.etree.ElementTree.iterparse` and a map from element
name to handler function. Finished elements are cleared so memory use does
not grow with the file. Every sample yields its own record when its end tag
is reached, so inner samples come before the sample enclosing them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Callable, Dict, Iterator, List, Optional
from xml.etree import ElementTree
from xml.parsers import expat

from jtlreport.config import DEFAULT_CONFIG, ReportConfig
from jtlreport.io.base import (
    MalformedRecordError,
    MalformedSourceError,
    Source,
    from_epoch_millis,
    parse_bool,
    parse_int,
    source_name,
)
from jtlreport.logging import get_logger
from jtlreport.model.record import AssertionFailure, Record

logger = get_logger(__name__)

# Parser errors meaning the file ends early, e.g. a test still running
_TRUNCATION_CODES = frozenset(
    expat.errors.codes[message]
    for message in (
        expat.errors.XML_ERROR_NO_ELEMENTS,
        expat.errors.XML_ERROR_UNCLOSED_TOKEN,
        expat.errors.XML_ERROR_PARTIAL_CHAR,
    )
)


@dataclass
class _OpenSample:
    position: int
    fields: Dict[str, object]
    failures: List[AssertionFailure] = field(default_factory=list)


@dataclass
class _ParseState:
    source: str
    config: ReportConfig
    stack: List[_OpenSample] = field(default_factory=list)
    samples_seen: int = 0


StartHandler = Callable[[_ParseState, ElementTree.Element], None]
EndHandler = Callable[[_ParseState, ElementTree.Element], Optional[Record]]


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _start_sample(state: _ParseState, elem: ElementTree.Element) -> None:
    state.samples_seen += 1
    position = state.samples_seen
    attrs = elem.attrib
    try:
        duration = parse_int(attrs.get("t"), "t")
        timestamp = from_epoch_millis(parse_int(attrs.get("ts"), "ts"))
        raw_bytes = attrs.get("by")
        bytes_received = parse_int(raw_bytes, "by") if raw_bytes is not None else None
    except (ValueError, OverflowError, OSError) as e:
        raise MalformedRecordError(str(e), state.source, position) from e

    state.stack.append(
        _OpenSample(
            position=position,
            fields={
                "label": attrs.get("lb", ""),
                "timestamp": timestamp,
                "duration_ms": duration,
                "success": parse_bool(attrs.get("s")),
                "result_code": attrs.get("rc"),
                "response_message": attrs.get("rm"),
                "bytes_received": bytes_received,
            },
        )
    )


def _end_sample(state: _ParseState, elem: ElementTree.Element) -> Optional[Record]:
    sample = state.stack.pop()
    config = state.config
    return Record.create(
        assertion_failures=sample.failures,
        label_length=config.label_length,
        result_code_length=config.result_code_length,
        message_length=config.message_length,
        **sample.fields,
    )


def _end_assertion(state: _ParseState, elem: ElementTree.Element) -> Optional[Record]:
    failed = parse_bool(elem.findtext("failure"))
    errored = parse_bool(elem.findtext("error"))
    if (failed or errored) and state.stack:
        state.stack[-1].failures.append(
            AssertionFailure(
                name=elem.findtext("name") or "",
                message=elem.findtext("failureMessage") or "",
            )
        )
    return None


START_HANDLERS: Dict[str, StartHandler] = {
    "sample": _start_sample,
    "httpSample": _start_sample,
}

END_HANDLERS: Dict[str, EndHandler] = {
    "sample": _end_sample,
    "httpSample": _end_sample,
    "assertionResult": _end_assertion,
}


def iter_xml_records(
    source: Source, config: ReportConfig = DEFAULT_CONFIG
) -> Iterator[Record]:
    """Yield one record per sample element of an XML JTL source.

    Args:
        source: Path or binary stream.
        config: Supplies the truncation limits and ``tolerate_truncated_xml``.

    Raises:
        MalformedRecordError: A sample lacks a numeric ``t`` or ``ts``.
        MalformedSourceError: The document is not well-formed XML. A file
            that merely stops early is accepted only when
            ``config.tolerate_truncated_xml`` is set.
    """
    if isinstance(source, (str, Path)):
        with open(source, "rb") as stream:
            yield from _iter_stream(stream, source_name(source), config)
    else:
        yield from _iter_stream(source, source_name(source), config)


def _iter_stream(stream: IO, name: str, config: ReportConfig) -> Iterator[Record]:
    state = _ParseState(source=name, config=config)
    root: Optional[ElementTree.Element] = None
    produced = 0

    events = ElementTree.iterparse(stream, events=("start", "end"))
    try:
        for event, elem in events:
            tag = _local_name(elem.tag)
            if event == "start":
                if root is None:
                    root = elem
                handler = START_HANDLERS.get(tag)
                if handler is not None:
                    handler(state, elem)
                continue

            end_handler = END_HANDLERS.get(tag)
            if end_handler is None:
                continue
            record = end_handler(state, elem)
            elem.clear()
            if record is not None:
                produced += 1
                yield record
                if not state.stack and root is not None:
                    root.clear()
    except ElementTree.ParseError as e:
        if e.code in _TRUNCATION_CODES and config.tolerate_truncated_xml:
            logger.warning(
                f"{name} ends early ({e}); keeping {produced} complete samples"
            )
            return
        if e.code in _TRUNCATION_CODES:
            raise MalformedSourceError(f"document ends early: {e}", name) from e
        raise MalformedSourceError(f"invalid XML: {e}", name) from e
