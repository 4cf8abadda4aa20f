from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Protocol

import dateparser

from ..enums import Priority, TaskStatus
from ..utils.text import collapse_whitespace, cut

logger = logging.getLogger(__name__)

LABEL_PAT = re.compile(r"#([A-Za-z0-9_-]+)")
PRIORITY_PHRASE_PAT = re.compile(r"\b(high|medium|low|p1|p2|p3)\s+priority\b", re.IGNORECASE)
PRIORITY_WORD_PAT = re.compile(r"\b(high|medium|low|urgent|important|p1|p2|p3)\b", re.IGNORECASE)
ASSIGNEE_PAT = re.compile(r"(?<!\w)@([A-Za-z]+)")
DATE_KEYWORD_PAT = re.compile(r"\b(today|tomorrow|this week|next week)\b", re.IGNORECASE)
WEEKDAY_PAT = re.compile(r"\b(monday|tuesday|wednesday|thursday|friday|saturday|sunday)\b", re.IGNORECASE)
NUMERIC_DATE_PAT = re.compile(r"\b\d{1,2}([/-])\d{1,2}\1\d{2,4}\b")
TIME_PAT = re.compile(r"\b(\d+(?:\.\d+)?)\s*(hours?|h|minutes?|mins?|m)\b", re.IGNORECASE)
STATUS_PAT = re.compile(r"\b(todo|in-progress|in progress|review|done|completed)\b", re.IGNORECASE)

PRIORITY_WORDS = {
    "high": Priority.high,
    "p1": Priority.high,
    "urgent": Priority.high,
    "medium": Priority.medium,
    "p2": Priority.medium,
    "important": Priority.medium,
    "low": Priority.low,
    "p3": Priority.low,
}

STATUS_WORDS = {
    "todo": TaskStatus.todo,
    "in-progress": TaskStatus.in_progress,
    "in progress": TaskStatus.in_progress,
    "review": TaskStatus.review,
    "done": TaskStatus.done,
    "completed": TaskStatus.done,
}

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
FRIDAY = WEEKDAYS.index("friday")

DATE_SETTINGS = {
    "DATE_ORDER": "MDY",
    "STRICT_PARSING": True,
}


class RosterMember(Protocol):
    id: str
    name: str


@dataclass
class ParsedTask:
    title: str
    priority: Priority | None = None
    assignee: str | None = None
    due_date: datetime | None = None
    estimated_hours: float | None = None
    labels: list[str] | None = None
    status: TaskStatus | None = None


@dataclass(frozen=True)
class ParseContext:
    roster: Sequence[RosterMember]
    now: datetime


Stage = Callable[[str, ParsedTask, ParseContext], tuple[str, ParsedTask]]


def extract_labels(work: str, parsed: ParsedTask, ctx: ParseContext) -> tuple[str, ParsedTask]:
    labels = [m.group(1).lower() for m in LABEL_PAT.finditer(work)]
    if not labels:
        return work, parsed
    return LABEL_PAT.sub("", work), replace(parsed, labels=labels)


def extract_priority(work: str, parsed: ParsedTask, ctx: ParseContext) -> tuple[str, ParsedTask]:
    m = PRIORITY_PHRASE_PAT.search(work) or PRIORITY_WORD_PAT.search(work)
    if not m:
        return work, parsed
    priority = PRIORITY_WORDS[m.group(1).lower()]
    return cut(work, *m.span()), replace(parsed, priority=priority)


def _match_full_name(work: str, at: int, roster: Sequence[RosterMember]) -> tuple[RosterMember | None, int]:
    """A typed full name ("@Alice Johnson") beats the first-word lookup and is consumed whole."""
    for member in roster:
        words = member.name.split()
        if len(words) < 2:
            continue
        pat = re.compile("@" + r"\s+".join(re.escape(w) for w in words) + r"(?![A-Za-z])", re.IGNORECASE)
        m = pat.match(work, at)
        if m:
            return member, m.end()
    return None, at


def find_member(typed: str, roster: Sequence[RosterMember]) -> RosterMember | None:
    """
    Case-insensitive containment either way: the member's name contains the
    typed name, or the typed name contains the member's first name.
    First roster entry that matches wins.
    """
    typed = typed.strip().lower()
    if not typed:
        return None
    for member in roster:
        name = member.name.lower()
        words = name.split()
        if not words:
            continue
        if typed in name or words[0] in typed:
            return member
    return None


def extract_assignee(work: str, parsed: ParsedTask, ctx: ParseContext) -> tuple[str, ParsedTask]:
    m = ASSIGNEE_PAT.search(work)
    if not m:
        return work, parsed
    member, end = _match_full_name(work, m.start(), ctx.roster)
    if member is None:
        member, end = find_member(m.group(1), ctx.roster), m.end()
    if member is None:
        # unresolved mentions are still dropped from the title
        logger.debug("No roster match for @%s", m.group(1))
        return cut(work, m.start(), end), parsed
    return cut(work, m.start(), end), replace(parsed, assignee=str(member.id))


def _days_until(weekday: int, now: datetime) -> int:
    return (weekday - now.weekday()) % 7 or 7


def _resolve_keyword(word: str, now: datetime) -> datetime:
    word = " ".join(word.lower().split())
    if word == "today":
        return now
    if word == "tomorrow":
        return now + timedelta(days=1)
    if word == "this week":
        return now + timedelta(days=_days_until(FRIDAY, now))
    # next week: Friday of the following week, weeks starting on Sunday
    sunday_index = (now.weekday() + 1) % 7
    return now + timedelta(days=12 - sunday_index)


def parse_numeric_date(token: str, now: datetime) -> datetime | None:
    parsed = dateparser.parse(token.replace("-", "/"), languages=["en"], settings=DATE_SETTINGS)
    if parsed is None:
        return None
    parsed = parsed.replace(hour=0, minute=0, second=0, microsecond=0)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=now.tzinfo)
    return parsed


def extract_due_date(work: str, parsed: ParsedTask, ctx: ParseContext) -> tuple[str, ParsedTask]:
    m = DATE_KEYWORD_PAT.search(work)
    if m:
        due = _resolve_keyword(m.group(1), ctx.now)
    else:
        m = WEEKDAY_PAT.search(work)
        if m:
            due = ctx.now + timedelta(days=_days_until(WEEKDAYS.index(m.group(1).lower()), ctx.now))
        else:
            m = NUMERIC_DATE_PAT.search(work)
            if not m:
                return work, parsed
            due = parse_numeric_date(m.group(0), ctx.now)
            if due is None:
                logger.debug("Unparseable date %r dropped", m.group(0))
    return cut(work, *m.span()), replace(parsed, due_date=due)


def extract_estimate(work: str, parsed: ParsedTask, ctx: ParseContext) -> tuple[str, ParsedTask]:
    m = TIME_PAT.search(work)
    if not m:
        return work, parsed
    amount = float(m.group(1))
    hours = amount if m.group(2).lower().startswith("h") else amount / 60
    # a zero estimate is not an estimate
    return cut(work, *m.span()), replace(parsed, estimated_hours=hours if hours > 0 else None)


def extract_status(work: str, parsed: ParsedTask, ctx: ParseContext) -> tuple[str, ParsedTask]:
    m = STATUS_PAT.search(work)
    if not m:
        return work, parsed
    status = STATUS_WORDS[" ".join(m.group(1).lower().split())]
    return cut(work, *m.span()), replace(parsed, status=status)


# Order is precedence: a token consumed by an earlier stage is invisible to later ones.
STAGES: tuple[Stage, ...] = (
    extract_labels,
    extract_priority,
    extract_assignee,
    extract_due_date,
    extract_estimate,
    extract_status,
)


def parse_quick_task(text: str, roster: Sequence[RosterMember], now: datetime) -> ParsedTask:
    """
    Parse one line of quick-add text into a ParsedTask.

    - labels via #tag (all of them, lower-cased)
    - priority: 'high priority', p1..p3, urgent, important
    - assignee via @name, resolved against the roster
    - due: today, tomorrow, this week, next week, weekday names, 1/20/2024
    - estimate: 2h, 1.5 hours, 30m, 90 minutes
    - status: todo, in progress, review, done
    The rest becomes the title; if nothing is left the trimmed input is kept.
    Relative dates are whole days added to `now`, keeping its time and tzinfo.
    """
    original = text.strip()
    ctx = ParseContext(roster=roster, now=now)
    work = original
    parsed = ParsedTask(title=original)
    for stage in STAGES:
        work, parsed = stage(work, parsed, ctx)

    parsed = replace(parsed, title=collapse_whitespace(work) or original)
    logger.debug("Parsed %r -> %r", original, parsed)
    return parsed
