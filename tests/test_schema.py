"""
Tests for the Schema façade: parse, parse_many and result values.
"""

import threading

import pytest

from schema_engine import EngineConfig, Err, ErrorKind, FieldError, Ok, ParseError, Schema, SchemaDefinitionError


REQUIRED = [FieldError("can't be blank", {"validation": "required"})]


class TestPostScenario:
    """title: string(required), description: string, likes: integer(required, minimum 0)."""

    def test_empty_input(self, post_schema):
        result = post_schema.parse({})
        assert result == Err({"title": REQUIRED, "likes": REQUIRED}, ErrorKind.STRUCTURAL)

    def test_valid_input(self, post_schema):
        record = post_schema.parse({"title": "Valid", "likes": 10}).unwrap()
        assert record.title == "Valid"
        assert record.likes == 10
        assert record.description is None

    def test_negative_likes(self, post_schema):
        value = {"title": "X", "likes": -1}
        assert post_schema.parse(value).unwrap().likes == -1
        result = post_schema.parse(value, validate_json=True)
        assert result.kind == ErrorKind.JSON_SCHEMA
        assert [v.path for v in result.errors] == ["#/likes"]

    def test_validate_json_then_cast(self, post_schema):
        record = post_schema.parse({"title": "Valid", "likes": 10}, validate_json=True).unwrap()
        assert record == post_schema.parse({"title": "Valid", "likes": 10}).unwrap()

    def test_string_keys_and_record_input(self, post_schema):
        record = post_schema.parse({"title": "Valid", "likes": "10"}).unwrap()
        assert post_schema.parse(record, validate_json=True).unwrap() == record

    def test_dump(self, post_schema):
        record = post_schema.parse({"title": "Valid", "likes": 10}).unwrap()
        assert post_schema.dump(record) == {"title": "Valid", "description": None, "likes": 10}


class TestParseMany:
    """Batch semantics."""

    VALID = [{"x": 0, "y": 0}, {"x": 0, "y": None}, {"x": 0}]
    INVALID = [{"x": None}, {"equired": None, "y": 1}, {"y": 1}, {"y": None}, {}]

    def test_all_valid(self, point_schema):
        records = point_schema.parse_many(self.VALID).unwrap()
        assert [record.x for record in records] == [0, 0, 0]
        assert [record.y for record in records] == [0, None, None]

    def test_all_invalid(self, point_schema):
        result = point_schema.parse_many(self.INVALID)
        assert result.kind == ErrorKind.BATCH
        assert result.errors == [{"x": REQUIRED}] * len(self.INVALID)

    def test_mixed(self, point_schema):
        result = point_schema.parse_many(self.VALID + self.INVALID)
        assert not result.is_ok
        assert len(result.errors) == len(self.INVALID)

    def test_one_invalid(self, point_schema):
        result = point_schema.parse_many(self.VALID + self.INVALID[:1])
        assert result == Err([{"x": REQUIRED}], ErrorKind.BATCH)

    def test_reports_in_input_order(self, point_schema):
        result = point_schema.parse_many([{"x": "a"}, {"x": 1}, {}])
        assert result.errors[0]["x"][0].message == "is invalid"
        assert result.errors[1] == {"x": REQUIRED}

    def test_empty_batch(self, point_schema):
        assert point_schema.parse_many([]) == Ok([])

    def test_generator_input(self, point_schema):
        assert len(point_schema.parse_many({"x": i} for i in range(3)).unwrap()) == 3

    @pytest.mark.parametrize("values", [{"x": 1}, "abc"])
    def test_rejects_non_sequences(self, point_schema, values):
        with pytest.raises(TypeError):
            point_schema.parse_many(values)

    def test_json_violations_per_element(self, post_schema):
        result = post_schema.parse_many([{"title": "a", "likes": 1}, {"title": "b", "likes": -1}], validate_json=True)
        assert result.kind == ErrorKind.BATCH
        assert [[v.path for v in report] for report in result.errors] == [["#/likes"]]

    def test_parallel_preserves_order(self, point_schema):
        values = [{"x": i} for i in range(200)]
        records = point_schema.parse_many(values, max_workers=8).unwrap()
        assert [record.x for record in records] == list(range(200))

    def test_parallel_failures_in_order(self, point_schema):
        checked = point_schema.with_validator("x", lambda schema, value, prop: (value % 3 != 0, f"bad {value}"))
        result = checked.parse_many([{"x": i} for i in range(60)], max_workers=4)
        messages = [report["x"][0].message for report in result.errors]
        assert messages == [f"bad {i}" for i in range(0, 60, 3)]

    def test_workers_from_config(self):
        schema = Schema("Point", {"x": ("integer", {"required": True})}, config=EngineConfig(parse_many_workers=4))
        threads = set()

        def track(schema, value, prop):
            threads.add(threading.get_ident())
            return True, ""

        records = schema.with_validator("x", track).parse_many([{"x": i} for i in range(50)]).unwrap()
        assert [record.x for record in records] == list(range(50))
        assert threading.get_ident() not in threads


class TestResults:
    """Ok / Err values."""

    def test_ok(self):
        result = Ok(5)
        assert result.is_ok
        assert result.unwrap() == 5

    def test_err_unwrap_raises(self, post_schema):
        result = post_schema.parse({})
        with pytest.raises(ParseError) as exc_info:
            result.unwrap()
        assert exc_info.value.errors == result.errors
        assert isinstance(exc_info.value, ValueError)

    def test_results_are_frozen(self):
        with pytest.raises(Exception):
            Ok(1).value = 2


class TestDefinition:
    """Schema construction."""

    def test_invalid_name(self):
        with pytest.raises(SchemaDefinitionError):
            Schema("", {"x": "integer"})

    def test_string_reference_without_engine(self):
        with pytest.raises(SchemaDefinitionError):
            Schema("Post", {"author": {"object": "User"}})

    def test_repr(self, post_schema):
        assert repr(post_schema) == "Schema('Post', fields=['title', 'description', 'likes'])"

    def test_record_model_name(self, post_schema):
        assert post_schema.record_model.__name__ == "Post"

    def test_shared_child_schema(self, child_schema, config):
        first = Schema("First", {"child": {"object": child_schema}}, config=config)
        second = Schema("Second", {"children": {"array": child_schema}}, config=config)
        value = {"x": 1, "y": 2, "z": 3}
        assert first.parse({"child": value}).unwrap().child == second.parse({"children": [value]}).unwrap().children[0]
