import pytest

from schema_engine import Property, PropertyTable, ScalarKind, ScalarType, SchemaDefinitionError
from schema_engine import classifier


INTEGER = ScalarType(ScalarKind.INTEGER)


class TestPropertyTable:
    """Building tables from Property values and declarations."""

    def test_declaration_preserves_order(self):
        table = PropertyTable.from_declaration({
            "title": ("string", {"required": True}),
            "description": "text",
            "likes": ("integer", {"minimum": 0}),
        })
        assert table.names == ("title", "description", "likes")
        assert table["description"].type == ScalarType(ScalarKind.STRING)
        assert table["likes"].options == {"minimum": 0}

    def test_none_options_are_empty(self):
        table = PropertyTable.from_declaration({"x": ("integer", None)})
        assert dict(table["x"].options) == {}

    def test_duplicate_names_rejected(self):
        with pytest.raises(SchemaDefinitionError) as exc_info:
            PropertyTable([Property("x", INTEGER), Property("x", INTEGER)])
        assert "Duplicate field name" in str(exc_info.value)

    def test_table_is_read_only(self):
        table = PropertyTable([Property("x", INTEGER)])
        with pytest.raises(TypeError):
            table["y"] = Property("y", INTEGER)

    def test_options_are_read_only(self):
        prop = Property("x", INTEGER, {"required": True})
        with pytest.raises(TypeError):
            prop.options["required"] = False

    def test_declaration_must_be_mapping(self):
        with pytest.raises(SchemaDefinitionError):
            PropertyTable.from_declaration([("x", "integer")])

    def test_malformed_entry(self):
        with pytest.raises(SchemaDefinitionError):
            PropertyTable.from_declaration({"x": ("integer", {}, "extra")})

    def test_existing_table_passes_through(self):
        table = PropertyTable([Property("x", INTEGER)])
        assert PropertyTable.from_declaration(table) is table


class TestPropertyValidation:
    """Definition-time checks on names and options."""

    @pytest.mark.parametrize("name", ["", "_private", "model_config", "model_fields"])
    def test_reserved_or_empty_names(self, name):
        with pytest.raises(SchemaDefinitionError):
            Property(name, INTEGER)

    @pytest.mark.parametrize("name", ["json", "schema", "copy", "dict", "validate", "construct"])
    def test_record_model_attribute_names(self, name):
        with pytest.raises(SchemaDefinitionError, match="reserved by the record model"):
            Property(name, INTEGER)

    @pytest.mark.parametrize("options", [
        {"required": "yes"},
        {"minimum": "0"},
        {"maximum": True},
        {"multiple_of": 0},
        {"min_length": -1},
        {"max_items": 1.5},
        {"unique_items": 1},
        {"pattern": 123},
        {"format": None},
    ])
    def test_invalid_options(self, options):
        with pytest.raises(SchemaDefinitionError):
            Property("x", INTEGER, options)

    def test_unrecognized_options_kept(self):
        prop = Property("x", INTEGER, {"read_only": True, "description": "count"})
        assert prop.constraint_options() == {"read_only": True, "description": "count"}

    def test_constraint_options_exclude_required(self):
        prop = Property("x", INTEGER, {"required": True, "minimum": 1})
        assert prop.constraint_options() == {"minimum": 1}


class TestClassifier:
    """Required/optional and embedded/non-embedded partitions."""

    def test_post_partition(self, post_schema):
        result = classifier.classify(post_schema.table)
        assert result.all_fields == ["title", "description", "likes"]
        assert result.non_embedded == ["title", "description", "likes"]
        assert result.required == ["title", "likes"]
        assert result.required_non_embedded == ["title", "likes"]
        assert classifier.optional_fields(post_schema.table) == ["description"]

    def test_parent_partition(self, parent_schema):
        table = parent_schema.table
        assert classifier.all_non_embeds(table) == ["scalar"]
        assert classifier.embedded_fields(table) == ["embed_one", "embed_many"]
        assert classifier.required_fields(table) == ["scalar", "embed_one", "embed_many"]
        assert classifier.required_non_embeds(table) == ["scalar"]

    def test_arrays_of_enums_and_scalars_are_not_embedded(self, dummy_schema):
        table = dummy_schema.table
        assert not classifier.is_embedded(table["array_integer"].type)
        assert not classifier.is_embedded(table["array_enum_abc"].type)
        assert classifier.embedded_fields(table) == []

    def test_required_must_be_true(self):
        assert not classifier.is_required(Property("x", INTEGER))
        assert not classifier.is_required(Property("x", INTEGER, {"required": False}))
        assert classifier.is_required(Property("x", INTEGER, {"required": True}))

    def test_schema_accessors_match_classifier(self, parent_schema):
        assert parent_schema.all_fields() == ["scalar", "embed_one", "embed_many"]
        assert parent_schema.optional_fields() == []
        assert parent_schema.required_fields() == ["scalar", "embed_one", "embed_many"]
        assert parent_schema.all_non_embeds() == ["scalar"]
        assert parent_schema.required_non_embeds() == ["scalar"]
        assert parent_schema.properties() is parent_schema.table
