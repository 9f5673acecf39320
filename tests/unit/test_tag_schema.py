import pytest
import yaml
from pydantic import ValidationError

from grepbase.core.exceptions import TagSchemaError
from grepbase.models import TagField, TagFieldType
from grepbase.tag_schema import TAG_SCHEMA_FILENAME, initialize_tag_schema, load_tag_schema, parse_tag_schema_response
from grepbase.utils.llm import Completion


class SchemaModel:
    def __init__(self, text):
        self.text = text
        self.calls = 0

    async def complete(self, prompt):
        self.calls += 1
        return Completion(text=self.text)


GENERATED = """Here you go:
```json
{"tag_fields": [
  {"name": "company", "type": "string[]", "description": "Companies mentioned"},
  {"name": "tone", "type": "enum", "description": "Tone", "enumValues": ["bullish", "bearish"]}
]}
```
"""


def test_field_type_is_a_closed_set():
    with pytest.raises(ValidationError):
        TagField(name="topic", type="strings", description="typo")


def test_enum_fields_require_values():
    with pytest.raises(ValidationError):
        TagField(name="tone", type=TagFieldType.ENUM_ARRAY, description="Tone")

    field = TagField(name="tone", type="enum[]", enumValues=["up", "down"])
    assert field.type.is_array and field.type.is_enum
    assert field.to_yaml_dict() == {"name": "tone", "type": "enum[]", "description": "", "enumValues": ["up", "down"]}


def test_parse_response_accepts_fenced_json_and_bare_yaml():
    schema = parse_tag_schema_response(GENERATED)
    assert [f.name for f in schema] == ["company", "tone"]
    assert schema[1].enum_values == ["bullish", "bearish"]

    bare = "- name: region\n  type: string\n  description: Region\n"
    assert parse_tag_schema_response(bare)[0].type is TagFieldType.STRING


def test_parse_response_rejects_garbage():
    with pytest.raises(TagSchemaError):
        parse_tag_schema_response("I cannot help with that.")


@pytest.mark.asyncio
async def test_supplied_schema_is_persisted(tmp_path, tag_schema):
    resolved = await initialize_tag_schema(tmp_path, None, "finance", tag_schema)

    assert resolved == tag_schema
    on_disk = yaml.safe_load((tmp_path / TAG_SCHEMA_FILENAME).read_text(encoding="utf-8"))
    assert [item["name"] for item in on_disk] == ["topic", "sentiment"]
    assert load_tag_schema(tmp_path / TAG_SCHEMA_FILENAME) == tag_schema


@pytest.mark.asyncio
async def test_schema_on_disk_wins_unless_overridden(tmp_path, tag_schema):
    await initialize_tag_schema(tmp_path, None, "finance", tag_schema)
    other = [TagField(name="region", type=TagFieldType.STRING, description="Region")]

    assert await initialize_tag_schema(tmp_path, None, "finance", other) == tag_schema
    assert await initialize_tag_schema(tmp_path, None, "finance", other, override=True) == other
    assert await initialize_tag_schema(tmp_path, None, "finance") == other


@pytest.mark.asyncio
async def test_schema_is_generated_once_when_missing(tmp_path):
    model = SchemaModel(GENERATED)

    first = await initialize_tag_schema(tmp_path, model, "finance")
    second = await initialize_tag_schema(tmp_path, model, "finance")

    assert model.calls == 1
    assert first == second
    assert [f.name for f in first] == ["company", "tone"]


@pytest.mark.asyncio
async def test_missing_schema_without_model_is_an_error(tmp_path):
    with pytest.raises(TagSchemaError):
        await initialize_tag_schema(tmp_path, None, "finance")


@pytest.mark.asyncio
async def test_override_without_supplied_schema_regenerates(tmp_path, tag_schema):
    await initialize_tag_schema(tmp_path, None, "finance", tag_schema)
    model = SchemaModel(GENERATED)

    resolved = await initialize_tag_schema(tmp_path, model, "finance", override=True)

    assert model.calls == 1
    assert [f.name for f in resolved] == ["company", "tone"]
    assert load_tag_schema(tmp_path / TAG_SCHEMA_FILENAME) == resolved
