import json
import time

import pytest

from examprep.errors import ExtractionError
from examprep.extraction import (
    ARRAY,
    OBJECT,
    extract_payload,
    match_closing_bracket,
    parse_question_record,
    parse_test_questions,
)
from examprep.schemas import QuestionRecord

from helpers import as_reply, mock_test_item, question_payload


class TestBracketScanner:
    def test_matches_nested_brackets(self):
        text = 'x {"a": {"b": [1, {"c": 2}]}} y'
        end = match_closing_bracket(text, 2)
        assert text[2:end] == '{"a": {"b": [1, {"c": 2}]}}'

    def test_ignores_brackets_inside_strings(self):
        text = '{"s": "} ] { [", "t": "\\"}"}'
        assert match_closing_bracket(text, 0) == len(text)

    def test_unterminated_returns_none(self):
        assert match_closing_bracket('{"a": [1, 2}', 0) is None
        assert match_closing_bracket('{"a": 1', 0) is None


class TestExtractPayload:
    def test_bare_json(self):
        assert extract_payload('{"a": 1}', OBJECT) == {"a": 1}

    def test_prose_before_and_after(self):
        raw = 'Sure! Here is the question:\n{"a": {"b": 2}}\nLet me know if you need more.'
        assert extract_payload(raw, OBJECT) == {"a": {"b": 2}}

    def test_markdown_fence(self):
        raw = '```json\n{"a": [1, 2, 3]}\n```'
        assert extract_payload(raw, OBJECT) == {"a": [1, 2, 3]}

    def test_trailing_commentary_with_braces(self):
        # A greedy first-{ to last-} match would swallow the trailing remark
        raw = '{"a": 1}\nNote: use {x} notation for sets {like this}.'
        assert extract_payload(raw, OBJECT) == {"a": 1}

    def test_braces_inside_explanation(self):
        payload = {"explanation": "The set {1, 2} has cardinality 2; f(x) = {x | x > 0}"}
        raw = "Answer:\n" + json.dumps(payload) + "\nDone."
        assert extract_payload(raw, OBJECT) == payload

    def test_skips_leading_non_json_brace_span(self):
        raw = 'Wrap answers in {braces}. {"a": 1}'
        assert extract_payload(raw, OBJECT) == {"a": 1}

    def test_skips_opener_closed_by_wrong_bracket(self):
        raw = 'Start {[ oops }. Real: {"a": 1}'
        assert extract_payload(raw, OBJECT) == {"a": 1}

    def test_recovers_balanced_span_inside_broken_structure(self):
        raw = '{"list": [{"a": 1}} tail'
        assert extract_payload(raw, OBJECT) == {"a": 1}

    def test_opener_running_to_end_stops_the_search(self):
        raw = 'Start { of nothing. Real: {"a": 1}'
        with pytest.raises(ExtractionError) as exc:
            extract_payload(raw, OBJECT)
        assert exc.value.kind == ExtractionError.MALFORMED_PAYLOAD
        assert "offset 6" in exc.value.message

    def test_array_shape(self):
        raw = 'Here is your test: [{"id": 1}, {"id": 2}] enjoy'
        assert extract_payload(raw, ARRAY) == [{"id": 1}, {"id": 2}]

    def test_array_inside_wrapper_object(self):
        raw = '{"totalMarks": 999, "questions": [{"id": 1}]}'
        assert extract_payload(raw, ARRAY) == [{"id": 1}]

    def test_raw_newline_inside_string(self):
        raw = '{"explanation": "line one\nline two"}'
        assert extract_payload(raw, OBJECT) == {"explanation": "line one\nline two"}

    def test_no_bracket_found(self):
        with pytest.raises(ExtractionError) as exc:
            extract_payload("Sure! Here's your question: Not JSON at all", OBJECT)
        assert exc.value.kind == ExtractionError.NO_BRACKET_FOUND

    def test_array_expected_but_only_object(self):
        with pytest.raises(ExtractionError) as exc:
            extract_payload('{"id": 1}', ARRAY)
        assert exc.value.kind == ExtractionError.NO_BRACKET_FOUND

    def test_malformed_payload(self):
        with pytest.raises(ExtractionError) as exc:
            extract_payload("Here: {question: 'single quotes', }", OBJECT)
        assert exc.value.kind == ExtractionError.MALFORMED_PAYLOAD

    def test_unterminated_payload_is_malformed(self):
        with pytest.raises(ExtractionError) as exc:
            extract_payload('{"question": "cut off', OBJECT)
        assert exc.value.kind == ExtractionError.MALFORMED_PAYLOAD
        assert "Unterminated" in exc.value.message

    def test_many_unclosed_openers_scan_in_linear_time(self):
        started = time.perf_counter()
        with pytest.raises(ExtractionError) as exc:
            extract_payload("{ " * 20_000 + '{"a": 1}', OBJECT)
        assert exc.value.kind == ExtractionError.MALFORMED_PAYLOAD
        assert extract_payload("[" * 20_000 + "} [1, 2]", ARRAY) == [1, 2]
        assert time.perf_counter() - started < 1.0

    def test_empty_text(self):
        with pytest.raises(ExtractionError) as exc:
            extract_payload("", OBJECT)
        assert exc.value.kind == ExtractionError.NO_BRACKET_FOUND

    def test_unknown_shape(self):
        with pytest.raises(ValueError):
            extract_payload("{}", "tuple")


class TestQuestionRecordExtraction:
    def test_recovers_record_from_prose(self):
        record = parse_question_record(as_reply(question_payload()))
        assert isinstance(record, QuestionRecord)
        assert record.correct_answer == "B"
        assert record.options == ["3", "4", "5", "6"]

    def test_skips_parseable_prose_before_the_record(self):
        raw = "Use the {} JSON format below:\n" + json.dumps(question_payload())
        record = parse_question_record(raw)
        assert record.question == "What is 2 + 2?"

    def test_reports_first_violation_when_nothing_validates(self):
        raw = "Template: {} then " + json.dumps(question_payload(correctAnswer="E"))
        with pytest.raises(ExtractionError) as exc:
            parse_question_record(raw)
        assert exc.value.kind == ExtractionError.SCHEMA_VIOLATION
        assert "question: Field required" in exc.value.message

    def test_round_trip_is_idempotent(self):
        record = parse_question_record(as_reply(question_payload()))
        again = parse_question_record(record.model_dump_json(by_alias=True))
        assert again == record
        wrapped = parse_question_record(as_reply(again.model_dump(by_alias=True), before="Result ", after=" end"))
        assert wrapped == record

    def test_two_options_is_schema_violation(self):
        raw = as_reply(question_payload(options=["a", "b"], correctAnswer="A"))
        with pytest.raises(ExtractionError) as exc:
            parse_question_record(raw)
        assert exc.value.kind == ExtractionError.SCHEMA_VIOLATION
        assert "options" in exc.value.message

    def test_answer_outside_a_to_d(self):
        with pytest.raises(ExtractionError) as exc:
            parse_question_record(as_reply(question_payload(correctAnswer="E")))
        assert exc.value.kind == ExtractionError.SCHEMA_VIOLATION

    def test_answer_letter_is_normalized(self):
        record = parse_question_record(as_reply(question_payload(correctAnswer=" c ")))
        assert record.correct_answer == "C"

    def test_missing_required_field(self):
        payload = question_payload()
        del payload["explanation"]
        with pytest.raises(ExtractionError) as exc:
            parse_question_record(as_reply(payload))
        assert exc.value.kind == ExtractionError.SCHEMA_VIOLATION

    def test_blank_option_rejected(self):
        with pytest.raises(ExtractionError) as exc:
            parse_question_record(as_reply(question_payload(options=["1", "", "3", "4"])))
        assert exc.value.kind == ExtractionError.SCHEMA_VIOLATION

    def test_numeric_options_are_stringified(self):
        record = parse_question_record(as_reply(question_payload(options=[1, 2.5, 3, 4])))
        assert record.options == ["1", "2.5", "3", "4"]

    def test_unknown_fields_are_dropped(self):
        record = parse_question_record(as_reply(question_payload(secret="leak")))
        assert "secret" not in record.model_dump(by_alias=True)


class TestTestQuestionsExtraction:
    def test_parses_questions_with_defaults(self):
        items = [mock_test_item(1), mock_test_item(2)]
        del items[1]["marks"]
        del items[1]["negativeMarks"]
        questions = parse_test_questions(as_reply(items))
        assert [q.id for q in questions] == [1, 2]
        assert questions[1].marks == 4
        assert questions[1].negative_marks == 1

    def test_null_marks_use_defaults(self):
        questions = parse_test_questions(json.dumps([mock_test_item(1, marks=None, negativeMarks=None)]))
        assert questions[0].marks == 4
        assert questions[0].negative_marks == 1

    def test_truncated_reply_is_malformed(self):
        items = [mock_test_item(i) for i in range(1, 6)]
        raw = "Here is your test:\n" + json.dumps(items)[:-40]
        with pytest.raises(ExtractionError) as exc:
            parse_test_questions(raw)
        assert exc.value.kind == ExtractionError.MALFORMED_PAYLOAD
        assert "Unterminated JSON array" in exc.value.message

    def test_skips_empty_array_in_prose(self):
        raw = "Options look like [] in the list below.\n" + json.dumps([mock_test_item(1)])
        assert [q.id for q in parse_test_questions(raw)] == [1]

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ExtractionError) as exc:
            parse_test_questions(json.dumps([mock_test_item(1), mock_test_item(1)]))
        assert exc.value.kind == ExtractionError.SCHEMA_VIOLATION
        assert "Duplicate" in exc.value.message

    def test_empty_array_rejected(self):
        with pytest.raises(ExtractionError) as exc:
            parse_test_questions("Here you go: []")
        assert exc.value.kind == ExtractionError.SCHEMA_VIOLATION

    def test_negative_marks_must_not_be_negative(self):
        with pytest.raises(ExtractionError) as exc:
            parse_test_questions(json.dumps([mock_test_item(1, negativeMarks=-1)]))
        assert "question 1" in exc.value.message

    def test_zero_id_rejected(self):
        with pytest.raises(ExtractionError):
            parse_test_questions(json.dumps([mock_test_item(0)]))

    def test_non_object_item_rejected(self):
        with pytest.raises(ExtractionError) as exc:
            parse_test_questions('[1, 2, 3]')
        assert exc.value.kind == ExtractionError.SCHEMA_VIOLATION
