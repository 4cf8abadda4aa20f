from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from taskboard.nlp.parser import (
    STAGES,
    ParseContext,
    ParsedTask,
    extract_labels,
    extract_priority,
    find_member,
    parse_quick_task,
)


def test_parser_extracts_every_field(roster, now):
    r = parse_quick_task("Fix login bug high priority tomorrow @alice 2h #bug", roster, now)
    assert r == ParsedTask(
        title="Fix login bug",
        priority="high",
        assignee="1",
        due_date=datetime(2024, 1, 16, 10, 0),
        estimated_hours=2,
        labels=["bug"],
    )


def test_parser_handles_minimal_text(roster, now):
    assert parse_quick_task("Buy milk", roster, now) == ParsedTask(title="Buy milk")


def test_parser_trims_and_keeps_empty_input(roster, now):
    assert parse_quick_task("  Fix login bug  ", roster, now).title == "Fix login bug"
    assert parse_quick_task("", roster, now) == ParsedTask(title="")


def test_token_placement_does_not_matter(roster, now):
    a = parse_quick_task("Fix login bug high priority tomorrow @alice 2h #bug", roster, now)
    b = parse_quick_task("#bug @alice 2h tomorrow Fix login bug high priority", roster, now)
    c = parse_quick_task("high priority Fix #bug login tomorrow bug 2h @alice", roster, now)
    assert a == b
    assert c.title == "Fix login bug"
    assert (c.priority, c.assignee, c.due_date, c.estimated_hours, c.labels) == (
        a.priority,
        a.assignee,
        a.due_date,
        a.estimated_hours,
        a.labels,
    )


@pytest.mark.parametrize(
    "text",
    ["#bug", "p1", "@alice", "tomorrow", "2h", "done", "high priority tomorrow @alice 2h #bug", "  @nobody  "],
)
def test_title_never_empty_for_non_blank_input(text, roster, now):
    r = parse_quick_task(text, roster, now)
    assert r.title
    assert r.title == " ".join(r.title.split())


@pytest.mark.parametrize(
    "text",
    [
        "Fix login bug high priority tomorrow @alice 2h #bug",
        "Design new landing page @bob next week #design #feature",
        "Update documentation low priority friday 1h",
        "Implement payment gateway p1 this week 8h @david #feature #backend",
    ],
)
def test_residual_title_is_stable(text, roster, now):
    title = parse_quick_task(text, roster, now).title
    assert parse_quick_task(title, roster, now) == ParsedTask(title=title)


# --- labels ---


def test_labels_are_lower_cased_in_order(roster, now):
    r = parse_quick_task("Ship it #Bug #Feature", roster, now)
    assert r.labels == ["bug", "feature"]
    assert r.title == "Ship it"


def test_labels_with_digits_and_dashes(roster, now):
    r = parse_quick_task("Fix bug #bug-fix #v2 #snake_case", roster, now)
    assert r.labels == ["bug-fix", "v2", "snake_case"]
    assert r.title == "Fix bug"


def test_keywords_inside_labels_are_not_reparsed(roster, now):
    r = parse_quick_task("Fix bug #urgent #high-priority #today", roster, now)
    assert r.labels == ["urgent", "high-priority", "today"]
    assert r.priority is None
    assert r.due_date is None
    assert r.title == "Fix bug"


# --- priority ---


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Fix login bug high priority", "high"),
        ("Fix login bug medium priority", "medium"),
        ("Fix login bug low priority", "low"),
        ("Fix login bug P2 priority", "medium"),
    ],
)
def test_priority_phrase(text, expected, roster, now):
    r = parse_quick_task(text, roster, now)
    assert r.priority == expected
    assert r.title == "Fix login bug"


@pytest.mark.parametrize(
    "word,expected",
    [("p1", "high"), ("p2", "medium"), ("p3", "low"), ("urgent", "high"), ("important", "medium"), ("LOW", "low")],
)
def test_priority_keywords(word, expected, roster, now):
    r = parse_quick_task(f"Task {word}", roster, now)
    assert r.priority == expected
    assert r.title == "Task"


def test_bare_priority_word_is_removed_from_title(roster, now):
    assert parse_quick_task("Fix urgent bug", roster, now).title == "Fix bug"
    r = parse_quick_task("Important task to complete", roster, now)
    assert r.priority == "medium"
    assert r.title == "task to complete"


def test_priority_phrase_beats_earlier_bare_word(roster, now):
    r = parse_quick_task("Triage urgent queue low priority", roster, now)
    assert r.priority == "low"
    assert "urgent" in r.title


def test_priority_words_need_word_boundaries(roster, now):
    r = parse_quick_task("Highlight the lowest bids", roster, now)
    assert r.priority is None
    assert r.title == "Highlight the lowest bids"


# --- assignee ---


@pytest.mark.parametrize("mention", ["@Alice", "@alice", "@ALICE", "@Alice Johnson", "@alice johnson"])
def test_assignee_resolution(mention, roster, now):
    r = parse_quick_task(f"Fix bug {mention}", roster, now)
    assert r.assignee == "1"
    assert r.title == "Fix bug"


def test_assignee_partial_name(roster, now):
    assert parse_quick_task("Fix bug @Bob", roster, now).assignee == "2"
    assert parse_quick_task("Fix bug @caro", roster, now).assignee == "3"


def test_unknown_assignee_is_still_stripped(roster, now):
    r = parse_quick_task("Fix bug @NonExistent", roster, now)
    assert r.assignee is None
    assert r.title == "Fix bug"


def test_assignee_with_empty_roster(now):
    r = parse_quick_task("Fix bug @alice", [], now)
    assert r.assignee is None
    assert r.title == "Fix bug"


def test_mention_does_not_swallow_following_words(roster, now):
    r = parse_quick_task("Fix bug @alice tomorrow", roster, now)
    assert r.assignee == "1"
    assert r.due_date == datetime(2024, 1, 16, 10, 0)
    assert r.title == "Fix bug"


def test_email_address_is_not_a_mention(roster, now):
    r = parse_quick_task("Reply to bob@example.com", roster, now)
    assert r.assignee is None
    assert r.title == "Reply to bob@example.com"


def test_find_member_first_match_wins(roster):
    roster = [*roster, type(roster[0])("5", "Alice Cooper")]
    assert find_member("alice", roster).id == "1"
    assert find_member("Bobby", roster).id == "2"
    assert find_member("zed", roster) is None
    assert find_member("", roster) is None


def test_full_name_prefers_exact_member(roster, now):
    roster = [type(roster[0])("5", "Alice Cooper"), *roster]
    r = parse_quick_task("Fix bug @Alice Johnson", roster, now)
    assert r.assignee == "1"
    assert r.title == "Fix bug"


# --- due dates ---


@pytest.mark.parametrize(
    "word,expected",
    [
        ("today", datetime(2024, 1, 15, 10, 0)),
        ("tomorrow", datetime(2024, 1, 16, 10, 0)),
        ("this week", datetime(2024, 1, 19, 10, 0)),
        ("next week", datetime(2024, 1, 26, 10, 0)),
        ("friday", datetime(2024, 1, 19, 10, 0)),
        ("Wednesday", datetime(2024, 1, 17, 10, 0)),
        ("sunday", datetime(2024, 1, 21, 10, 0)),
        ("monday", datetime(2024, 1, 22, 10, 0)),
    ],
)
def test_relative_due_dates(word, expected, roster, now):
    r = parse_quick_task(f"Fix bug {word}", roster, now)
    assert r.due_date == expected
    assert r.title == "Fix bug"


def test_this_week_on_a_friday_means_next_friday(roster):
    friday = datetime(2024, 1, 19, 9, 0)
    assert parse_quick_task("Ship this week", roster, friday).due_date == datetime(2024, 1, 26, 9, 0)
    assert parse_quick_task("Ship friday", roster, friday).due_date == datetime(2024, 1, 26, 9, 0)


def test_next_week_from_saturday(roster):
    saturday = datetime(2024, 1, 20, 9, 0)
    assert parse_quick_task("Ship next week", roster, saturday).due_date == datetime(2024, 1, 26, 9, 0)


def test_keywords_take_precedence_over_weekdays(roster, now):
    r = parse_quick_task("Call vendor friday tomorrow", roster, now)
    assert r.due_date == datetime(2024, 1, 16, 10, 0)
    assert r.title == "Call vendor friday"


@pytest.mark.parametrize("token", ["1/20/2024", "1-20-2024", "01/20/24"])
def test_numeric_dates(token, roster, now):
    r = parse_quick_task(f"Fix bug {token}", roster, now)
    assert (r.due_date.year, r.due_date.month, r.due_date.day) == (2024, 1, 20)
    assert r.title == "Fix bug"


def test_unparseable_numeric_date_is_dropped(roster, now):
    r = parse_quick_task("Fix bug 13/45/2024", roster, now)
    assert r.due_date is None
    assert r.title == "Fix bug"


def test_aware_now_keeps_its_timezone(roster):
    tz = ZoneInfo("America/Phoenix")
    now = datetime(2024, 1, 15, 23, 30, tzinfo=tz)
    assert parse_quick_task("Fix bug tomorrow", roster, now).due_date == datetime(2024, 1, 16, 23, 30, tzinfo=tz)
    assert parse_quick_task("Fix bug 1/20/2024", roster, now).due_date.tzinfo == tz


# --- estimates ---


@pytest.mark.parametrize(
    "token,hours",
    [
        ("2h", 2),
        ("1.5h", 1.5),
        ("3 hours", 3),
        ("1 hour", 1),
        ("30m", 0.5),
        ("45 min", 0.75),
        ("90 minutes", 1.5),
        ("2H", 2),
    ],
)
def test_time_estimates(token, hours, roster, now):
    r = parse_quick_task(f"Fix bug {token}", roster, now)
    assert r.estimated_hours == pytest.approx(hours)
    assert r.title == "Fix bug"


def test_only_first_estimate_is_used(roster, now):
    r = parse_quick_task("Fix bug 2h 30m", roster, now)
    assert r.estimated_hours == 2
    assert r.title == "Fix bug 30m"


def test_zero_estimate_is_dropped(roster, now):
    r = parse_quick_task("Fix bug 0h", roster, now)
    assert r.estimated_hours is None
    assert r.title == "Fix bug"


# --- status ---


@pytest.mark.parametrize(
    "word,expected",
    [
        ("todo", "todo"),
        ("in-progress", "in-progress"),
        ("in progress", "in-progress"),
        ("review", "review"),
        ("done", "done"),
        ("Completed", "done"),
    ],
)
def test_status_keywords(word, expected, roster, now):
    r = parse_quick_task(f"Fix bug {word}", roster, now)
    assert r.status == expected
    assert r.title == "Fix bug"


# --- stages ---


def test_stage_order():
    assert [s.__name__ for s in STAGES] == [
        "extract_labels",
        "extract_priority",
        "extract_assignee",
        "extract_due_date",
        "extract_estimate",
        "extract_status",
    ]


def test_stages_return_work_and_partial_result(roster, now):
    ctx = ParseContext(roster=roster, now=now)
    work, parsed = extract_labels("Fix #bug p1", ParsedTask(title="Fix #bug p1"), ctx)
    assert parsed.labels == ["bug"]
    work, parsed = extract_priority(work, parsed, ctx)
    assert parsed.priority == "high"
    assert work.split() == ["Fix"]


def test_stage_without_match_is_a_no_op(roster, now):
    ctx = ParseContext(roster=roster, now=now)
    start = ParsedTask(title="Plain")
    assert extract_labels("Plain", start, ctx) == ("Plain", start)


def test_multi_word_keywords_need_a_single_space(roster, now):
    r = parse_quick_task("Fix in #x progress", roster, now)
    assert r.labels == ["x"]
    assert r.status is None
    assert r.title == "Fix in progress"

    r = parse_quick_task("Ship this #y week", roster, now)
    assert r.due_date is None
    assert r.title == "Ship this week"


@pytest.mark.parametrize(
    "text,first,field,second,title",
    [
        ("Fix high low", "Fix low", "priority", "low", "Fix"),
        ("Fix 1/20/2024 friday", "Fix 1/20/2024", "due_date", datetime(2024, 1, 20), "Fix"),
        ("Fix bug 2h 30m", "Fix bug 30m", "estimated_hours", 0.5, "Fix bug"),
    ],
)
def test_second_token_of_a_stage_stays_in_title(text, first, field, second, title, roster, now):
    # each stage consumes its first match only; a second token of the same
    # kind is left in the title and is picked up if the title is parsed again
    r = parse_quick_task(text, roster, now)
    assert r.title == first
    again = parse_quick_task(r.title, roster, now)
    assert getattr(again, field) == second
    assert again.title == title
