import json

import pytest

from prisma_engine.decoder import decode_config, decode_dmmf
from prisma_engine.exceptions import DecodeError, EngineReportedError
from prisma_engine.models import DMMFDocument, WholeDMMF

DMMF_JSON = json.dumps(
    {
        "datamodel": {
            "models": [
                {
                    "name": "User",
                    "isEmbedded": False,
                    "dbName": None,
                    "fields": [
                        {
                            "name": "id",
                            "kind": "scalar",
                            "type": "Int",
                            "isId": True,
                            "isRequired": True,
                            "hasDefaultValue": True,
                            "default": {"name": "autoincrement", "args": []},
                        }
                    ],
                }
            ],
            "enums": [{"name": "Role", "values": [{"name": "ADMIN", "dbName": None}]}],
        },
        "schema": {"outputObjectTypes": {}},
        "mappings": {"modelOperations": []},
    }
)


@pytest.mark.unit
def test_decode_dmmf_reads_camel_case_keys():
    dmmf = decode_dmmf(DMMF_JSON, engine_path="/qe", operation="Schema parsing")

    assert isinstance(dmmf, DMMFDocument)
    user = dmmf.datamodel.get_model("User")
    assert user is not None
    assert user.fields[0].is_id is True
    assert user.fields[0].default == {"name": "autoincrement", "args": []}
    assert dmmf.datamodel.enums[0].value_names == ["ADMIN"]
    assert dmmf.schema_ == {"outputObjectTypes": {}}
    assert dmmf.datamodel.get_model("Post") is None


@pytest.mark.unit
def test_unknown_keys_survive_a_dump():
    payload = json.loads(DMMF_JSON)
    payload["datamodel"]["models"][0]["futureFlag"] = "kept"

    dmmf = decode_dmmf(json.dumps(payload), engine_path="/qe", operation="Schema parsing")

    dumped = dmmf.to_engine_dict()
    assert dumped["datamodel"]["models"][0]["futureFlag"] == "kept"
    assert dumped["datamodel"]["models"][0]["isEmbedded"] is False
    assert "is_embedded" not in dumped["datamodel"]["models"][0]


@pytest.mark.unit
def test_decode_config():
    stdout = json.dumps(
        {
            "datasources": [
                {
                    "name": "db",
                    "connectorType": "sqlite",
                    "url": {"value": "file:dev.db", "fromEnvVar": None},
                    "config": {},
                }
            ],
            "generators": [],
        }
    )

    config = decode_config(stdout, engine_path="/qe", operation="Get config")

    assert config.datasources[0].connector_type == "sqlite"
    assert config.datasources[0].url.value == "file:dev.db"
    assert config.generators == []


@pytest.mark.unit
def test_malformed_output_raises_decode_error():
    with pytest.raises(DecodeError) as exc_info:
        decode_dmmf("{not json", engine_path="/opt/qe", operation="Schema parsing")

    error = exc_info.value
    assert not isinstance(error, EngineReportedError)
    assert str(error).startswith(
        "Schema parsing problem while parsing the query engine response at /opt/qe. {not json"
    )
    assert error.engine_path == "/opt/qe"
    assert error.stdout == "{not json"


@pytest.mark.unit
def test_wrong_shape_raises_decode_error():
    with pytest.raises(DecodeError, match="Get config problem while parsing"):
        decode_config('{"datasources": 3}', engine_path="/qe", operation="Get config")


@pytest.mark.unit
def test_whole_dmmf_accepts_snake_case_and_dumps_camel_case():
    whole = WholeDMMF.model_validate(
        {
            "dmmf": {"models": [{"name": "User", "is_embedded": False}], "enums": []},
            "config": {"datasources": [], "generators": []},
        }
    )

    dumped = whole.to_engine_dict()

    assert dumped["dmmf"]["models"][0] == {"name": "User", "isEmbedded": False}
